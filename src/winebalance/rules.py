"""
Penalty and synergy rule catalog.

Penalties amplify a target's distance from its ideal window; synergies
shrink it. Both scale with the average deviation of their sources:
    effect = min(cap, k * avg_deviation ** p)
"""

from winebalance.schema import Rule, RuleConfig


PENALTY_RULES = [
    # Acidity penalties
    Rule(
        name="Clashing Sweetness",
        sources=['acidity'],
        targets=['sweetness'],
        condition=lambda wine: wine['acidity'] > 0.7 and wine['sweetness'] > 0.6,
        description="High acidity makes sweet wines taste overly tart and unbalanced.",
        requirement="(acidity>0.7, sweetness>0.6)",
        k=0.4,  # acidity/sweetness clash is very noticeable
        p=1.5,
        cap=2.0,
    ),
    Rule(
        name="Low Acidity Overpower",
        sources=['acidity'],
        targets=['aroma'],
        condition=lambda wine: wine['acidity'] < 0.5 and wine['body'] > 0.7,
        description="Low acidity with high body creates dull, heavy wines.",
        requirement="(acidity<0.5, body>0.7)",
        k=0.3,
        p=1.3,
        cap=2.0,
    ),
    Rule(
        name="Fixed Sweetness Penalty",
        sources=['acidity'],
        targets=['sweetness'],
        condition=lambda wine: wine['acidity'] < 0.3,
        description="Low acidity creates fixed penalty on sweetness regardless of acidity level.",
        requirement="(acidity<0.3)",
        k=0.15,
        p=1.0,  # linear, the cap makes it effectively fixed
        cap=0.15,
    ),

    # Body penalties
    Rule(
        name="Heavy Body Overpower",
        sources=['body'],
        targets=['aroma'],
        condition=lambda wine: wine['body'] > 0.7 and wine['aroma'] < 0.5,
        description="High body without matching aroma creates dull, heavy wines.",
        requirement="(body>0.7, aroma<0.5)",
        k=0.25,
        p=1.4,
        cap=0.36,
    ),
    Rule(
        name="Astringent Tannins",
        sources=['body'],
        targets=['tannins'],
        condition=lambda wine: wine['body'] < 0.5 and wine['tannins'] > 0.7,
        description="High tannins without sufficient body create harsh, astringent wines.",
        requirement="(tannins>0.7, body<0.5)",
        k=0.35,
        p=1.6,
        cap=0.36,
    ),

    # Sweetness penalties
    Rule(
        name="Sweet-Spice Clash",
        sources=['sweetness'],
        targets=['spice'],
        condition=lambda wine: wine['sweetness'] > 0.7 and wine['spice'] > 0.6,
        description="High sweetness clashes with high spice, creating an unbalanced wine.",
        requirement="(sweetness>0.7, spice>0.6)",
        k=0.45,
        p=1.7,
        cap=0.2,
    ),
    Rule(
        name="Acid-Sweet Imbalance",
        sources=['sweetness'],
        targets=['acidity'],
        condition=lambda wine: wine['sweetness'] < 0.4 and wine['acidity'] > 0.6,
        description="Low sweetness with high acidity creates overly tart wines.",
        requirement="(sweetness<0.4, acidity>0.6)",
        k=0.3,
        p=1.3,
        cap=0.24,
    ),

    # Tannin penalties
    Rule(
        name="Tannin-Sweet Clash",
        sources=['tannins'],
        targets=['sweetness'],
        condition=lambda wine: wine['tannins'] > 0.7 and wine['sweetness'] > 0.5,
        description="High tannins clash with sweet wines, creating harsh, unbalanced wines.",
        requirement="(tannins>0.7, sweetness>0.5)",
        k=0.4,
        p=1.5,
        cap=0.5,
    ),
    Rule(
        name="Tannin-Aroma Overpower",
        sources=['tannins'],
        targets=['aroma'],
        condition=lambda wine: wine['tannins'] > 0.7 and wine['aroma'] < 0.6,
        description="High tannins overpower low aroma, creating dull wines.",
        requirement="(tannins>0.7, aroma<0.6)",
        k=0.25,
        p=1.4,
        cap=0.3,
    ),
    Rule(
        name="Weak Tannin Structure",
        sources=['tannins'],
        targets=['body'],
        condition=lambda wine: wine['tannins'] < 0.4 and wine['body'] > 0.6,
        description="Low tannins with high body create weak, flabby wines.",
        requirement="(tannins<0.4, body>0.6)",
        k=0.3,
        p=1.3,
        cap=2.0,
    ),

    # Aroma penalties
    Rule(
        name="Aroma-Body Mismatch",
        sources=['aroma'],
        targets=['body'],
        condition=lambda wine: wine['aroma'] > 0.7 and wine['body'] < 0.6,
        description="High aroma without matching body creates unbalanced wines.",
        requirement="(aroma>0.7, body<0.6)",
        k=0.2,
        p=1.2,
        cap=0.3,
    ),
    Rule(
        name="Aroma-Spice Imbalance",
        sources=['aroma'],
        targets=['spice'],
        condition=lambda wine: wine['aroma'] < 0.4 and wine['spice'] > 0.6,
        description="Low aroma with high spice creates harsh, unbalanced wines.",
        requirement="(aroma<0.4, spice>0.6)",
        k=0.25,
        p=1.4,
        cap=0.24,
    ),

    # Spice penalties
    Rule(
        name="Spice-Acid Clash",
        sources=['spice'],
        targets=['acidity'],
        condition=lambda wine: wine['spice'] > 0.7 and wine['acidity'] > 0.6,
        description="High spice clashes with high acidity, creating harsh, unbalanced wines.",
        requirement="(spice>0.7, acidity>0.6)",
        k=0.4,
        p=1.6,
        cap=0.5,
    ),
    Rule(
        name="Spice-Body Overwhelm",
        sources=['spice'],
        targets=['body'],
        condition=lambda wine: wine['spice'] > 0.8 and wine['body'] < 0.4,
        description="High spice overwhelms light-bodied wines, making them feel thin and unbalanced.",
        requirement="(spice>0.8, body<0.4)",
        k=0.5,
        p=1.8,
        cap=2.0,
    ),
    Rule(
        name="Flat Heavy Body",
        sources=['spice'],
        targets=['body'],
        condition=lambda wine: wine['spice'] < 0.3 and wine['body'] > 0.7,
        description="Low spice makes high body wines feel flat and lifeless.",
        requirement="(spice<0.3, body>0.7)",
        k=0.25,
        p=1.3,
        cap=0.3,
    ),
]


SYNERGY_RULES = [
    # Cross-trait synergies
    Rule(
        name="Bold Red Structure",
        sources=['acidity'],
        targets=['tannins'],
        condition=lambda wine: wine['acidity'] > 0.7 and wine['tannins'] > 0.7,
        description="High acidity + high tannins create classic, structured red wines.",
        requirement="(acidity>0.7, tannins>0.7)",
        k=0.3,
        p=1.3,
        cap=0.75,
    ),
    Rule(
        name="Bright & Aromatic",
        sources=['acidity'],
        targets=['aroma'],
        condition=lambda wine: wine['acidity'] > 0.6 and wine['aroma'] > 0.7,
        description="High aroma with good acidity creates fresh, lively wines.",
        requirement="(aroma>0.7, acidity>0.6)",
        k=0.25,
        p=1.2,
        cap=0.5,
    ),

    # Self-benefiting synergies (sources == targets)
    Rule(
        name="Balanced Body & Spice",
        sources=['body', 'spice'],
        targets=['body', 'spice'],
        condition=lambda wine: 0.6 <= wine['body'] <= 0.8 and 0.6 <= wine['spice'] <= 0.8,
        description="When body and spice are both in the balanced range, they work harmoniously.",
        requirement="(body 0.6-0.8, spice 0.6-0.8)",
        k=0.25,
        p=1.1,
        cap=0.75,
    ),
    Rule(
        name="Powerful Red Blend",
        sources=['tannins', 'body', 'spice'],
        targets=['tannins', 'body', 'spice'],
        condition=lambda wine: wine['tannins'] > 0.7 and wine['body'] > 0.6 and wine['spice'] > 0.5,
        description="Tannins, body, and spice combine for complex, age-worthy reds.",
        requirement="(tannins>0.7, body>0.6, spice>0.5)",
        k=0.35,
        p=1.4,
        cap=0.65,
    ),
    Rule(
        name="Dessert Wine Body",
        sources=['aroma', 'sweetness', 'body'],
        targets=['aroma', 'sweetness', 'body'],
        condition=lambda wine: wine['aroma'] > 0.6 and wine['sweetness'] > 0.6 and wine['body'] > 0.7,
        description="Rich aroma, sweetness, and body create luxurious dessert wines.",
        requirement="(aroma>0.6, sweetness>0.6, body>0.7)",
        k=0.3,
        p=1.3,
        cap=0.7,
    ),
    Rule(
        name="Classic Balance",
        sources=['acidity', 'sweetness'],
        targets=['acidity', 'sweetness'],
        condition=lambda wine: 0.4 <= wine['acidity'] <= 0.6 and 0.4 <= wine['sweetness'] <= 0.6,
        description="Acidity and sweetness in harmony - the foundation of great wine.",
        requirement="(acidity 0.4-0.6, sweetness 0.4-0.6)",
        k=0.4,
        p=1.1,
        cap=0.6,
    ),
    Rule(
        name="Elegant Complexity",
        sources=['aroma', 'body'],
        targets=['aroma', 'body'],
        condition=lambda wine: wine['aroma'] > wine['body'] and 0.4 <= wine['sweetness'] <= 0.6,
        description="Aroma leads body with balanced sweetness for refined wines.",
        requirement="(aroma>body, sweetness 0.4-0.6)",
        k=0.25,
        p=1.2,
        cap=0.6,
    ),
]


RULES = RuleConfig(penalties=PENALTY_RULES, synergies=SYNERGY_RULES)
