"""
addons.py — Full ADD-ON tagger (coatings, finishes, functional properties, colors).

Three passes, each a plain function returning a new frozenset of labels:

1. match_features(): the FEATURES table, with each feature's own negations,
   the global "not impregnated, coated or laminated" style phrases, and the
   Film context guard.
2. match_colors(): the COLORS table. Compound colors come first and suppress
   their generic counterpart (SKY BLUE → no plain Blue).
3. clean_up(): cross-label rules over the merged set (specific coating vs
   generic Coated, glue coating, global negation re-check, redundant labels).

The result is sorted and joined with "; ", or "-" when nothing was found.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from nonwoven_tagger.normalize import NO_ADD_ONS, fold


# ── Rule types ─────────────────────────────────────────────

@dataclass(frozen=True)
class Negation:
    pattern: re.Pattern
    # Ignore this negation when a trigger still matches with the phrase removed
    retest_without: bool = False


@dataclass(frozen=True)
class ContextGuard:
    """Drop the label when every occurrence of `word` sits inside `phrase`."""
    word: re.Pattern
    phrase: re.Pattern
    window: int
    requires_any: tuple[str, ...]


@dataclass(frozen=True)
class FeatureDefinition:
    label: str
    triggers: tuple[re.Pattern, ...]
    negations: tuple[Negation, ...] = ()
    suppressed_by: tuple[str, ...] = ()
    specific_variants: tuple[str, ...] = ()
    context_guard: ContextGuard | None = None


@dataclass(frozen=True)
class GlobalNegation:
    pattern: re.Pattern
    labels: frozenset[str]


@dataclass(frozen=True)
class ColorDefinition:
    key: str
    pattern: re.Pattern
    suppressed_by: tuple[str, ...] = ()
    label: str = ""

    @property
    def output(self) -> str:
        return self.label or self.key


def _p(*patterns: str) -> tuple[re.Pattern, ...]:
    return tuple(re.compile(p) for p in patterns)


def _neg(*patterns: str) -> tuple[Negation, ...]:
    return tuple(Negation(re.compile(p)) for p in patterns)


SPECIFIC_COATINGS = ("PU Coated", "PVC Coated", "PE Coated", "HDPE Coated", "Thermoplastic Coated")

# Phrases that name a specific coating; removed before re-checking for a bare COATED
_SPECIFIC_COATING_PHRASES = _p(
    r'\bPU\sCOATED\b',
    r'\bPVC\sCOATED\b',
    r'\bPE\sCOATED\b',
    r'\bHDPE\sCOATED\b',
    r'\bHDPE\sGLUE\sON\sTHE\sSURFACE\b',
    r'\bTHERMOPLASTIC\sCOATED\b',
)

_GLUE_COATING = _p(r'\bCOATED\sWITH\sGLUE\b', r'\bGLUE-COATED\b')
_COATING_NEGATED = _p(r'\bNOT\sCOATED\b', r'\bUNCOATED\b')

GLOBAL_NEGATIONS: tuple[GlobalNegation, ...] = (
    GlobalNegation(re.compile(r'\bNOT\sIMPREGNATED,\sCOATED\sOR\sLAMINATED\b'),
                   frozenset({"Impregnated", "Coated", "Laminated"})),
    GlobalNegation(re.compile(r'\bUNIMPREGNATED,\sUNCOATED,\sUNLAMINATED\b'),
                   frozenset({"Impregnated", "Coated", "Laminated"})),
    GlobalNegation(re.compile(r'\bNOT\sIMPREGNATED\sOR\sCOATED\b'),
                   frozenset({"Impregnated", "Coated"})),
    GlobalNegation(re.compile(r'\bUNIMPREGNATED\sAND\sUNCOATED\b'),
                   frozenset({"Impregnated", "Coated"})),
)

# Generic labels checked against GLOBAL_NEGATIONS, with their bare keyword
_GLOBAL_KEYWORDS = {
    "Coated": re.compile(r'\bCOATED\b'),
    "Laminated": re.compile(r'\bLAMINATED\b'),
    "Impregnated": re.compile(r'\bIMPREGNATED\b'),
}


# ── Feature table ──────────────────────────────────────────
# Table order matters: the Film guard looks at labels produced earlier.

FEATURES: tuple[FeatureDefinition, ...] = (
    # Physical and mechanical
    FeatureDefinition("PU Coated", _p(r'\bPU\sCOATED\b', r'\bPOLYURETHANE\sCOATED\b')),
    FeatureDefinition("PVC Coated", _p(r'\bPVC\sCOATED\b', r'\bVINYL\sCHLORIDE\s\(PVC\sPLASTIC\)')),
    FeatureDefinition("PE Coated", _p(r'\bPE\sCOATED\b')),
    FeatureDefinition("HDPE Coated", _p(r'\bHDPE\s(?:GLUE\sON\sTHE\sSURFACE|COATED)\b')),
    FeatureDefinition("Thermoplastic Coated", _p(r'\bTHERMOPLASTIC\s(?:NYLON\sPA|ADHESIVE|COATED)\b')),
    FeatureDefinition(
        "Laminated",
        _p(r'\bLAMINATED\b', r'\bMULTI-LAYER\sLAMINATED\b'),
        negations=_neg(r'\bNOT\sLAMINATED\b', r'\bUNLAMINATED\b'),
    ),
    FeatureDefinition(
        "Coated",
        _p(r'\bCOATED\b', r'\bSURFACE\sCOATED\b'),
        negations=_neg(r'\bNOT\sCOATED\b', r'\bUNCOATED\b', r'\bNOT\sCOATED\sWITH\sGLUE\b'),
        specific_variants=SPECIFIC_COATINGS,
    ),
    FeatureDefinition(
        "Impregnated",
        _p(r'\bIMPREGNATED\b', r'\bCHEMICALLY\sIMPREGNATED\b', r'\bSOAKED\b'),
        negations=_neg(r'\bNOT\sIMPREGNATED\b', r'\bUNIMPREGNATED\b'),
    ),
    FeatureDefinition("Perforated", _p(r'\bPERFORATED\b', r'\bPUNCHED\b', r'\bNEEDLE-PUNCHED\b', r'\bNEEDLE\sPUNCHED\b')),
    FeatureDefinition("Embossed", _p(r'\bEMBOSSED\b', r'\bTEXTURED\b', r'\b(?:3D\s)?(?:SINGLE\s)?PEARL\sEMBOSSING\b')),
    FeatureDefinition("Ultrasonic Sealed", _p(r'\bULTRASONIC\sSEALED\b')),
    FeatureDefinition("Heat Sealed", _p(r'\bHEAT\sSEALED\b', r'\bHOT\sMELT\b')),
    FeatureDefinition("Reinforced", _p(r'\bREINFORCED\b')),
    FeatureDefinition("Pressed", _p(r'\bPRESSED\b', r'\bCOMPRESSED\b')),
    FeatureDefinition("Non-Slip", _p(r'\bNON-SLIP\b', r'\bANTI-SLIP\b', r'\bNON-STICK\b')),
    FeatureDefinition("Antistatic", _p(r'\bANTISTATIC\b', r'\bANTI-STATIC\b', r'\bESD\b', r'\bELECTROSTATIC\sFILTER\b')),
    FeatureDefinition("High Loft", _p(r'\bHILOFT\b', r'\bHIGH\sLOFT\b')),
    FeatureDefinition("Low Loft", _p(r'\bLOW\sLOFT\b')),
    FeatureDefinition(
        "Breathable",
        _p(r'\bBREATHABLE\b', r'\bAIR\sPERMEABLE\b'),
        # NON-BREATHABLE reports Non-Breathable only
        negations=_neg(r'\bNON-BREATHABLE\b'),
    ),
    FeatureDefinition("Non-Breathable", _p(r'\bNON-BREATHABLE\b')),

    # Chemical and functional
    FeatureDefinition("Hydrophilic", _p(r'\bHYDROPHILIC\b', r'\bLEG\sHI\b', r'\bTOP\sHI\b', r'\bCARRIER\sHI\b')),
    FeatureDefinition("Hydrophobic", _p(r'\bHYDROPHOBIC\b', r'\bLEG\sHO\b', r'\bEAR\sHO\b', r'\bST\sHO\b')),
    FeatureDefinition("Non-Absorbent", _p(r'\bNON-ABSORBENT\b')),
    FeatureDefinition("Antimicrobial", _p(r'\bANTIMICROBIAL\b', r'\bANTI-MICROBIAL\b')),
    FeatureDefinition("Antibacterial", _p(r'\bANTIBACTERIAL\b', r'\bANTI-BACTERIAL\b')),
    FeatureDefinition("Antiviral", _p(r'\bANTIVIRAL\b', r'\bANTI-VIRAL\b')),
    FeatureDefinition("Flame Retardant", _p(r'\bFLAME\sRETARDANT\b', r'\bFIRE\sRESISTANT\b')),
    FeatureDefinition("UV Stabilized", _p(r'\bUV\sSTABILIZED\b', r'\bUV\sRESISTANT\b')),
    FeatureDefinition("Oil Absorbent", _p(r'\bOIL\sABSORBENT\b')),
    FeatureDefinition("Oil Repellent", _p(r'\bOIL\sREPELLENT\b')),
    FeatureDefinition("Chemical Resistant", _p(r'\bCHEMICAL\sRESISTANT\b', r'\bALCOHOL-RESISTANT\b')),
    FeatureDefinition("Antifungal", _p(r'\bANTIFUNGAL\b', r'\bMOLD\sRESISTANT\b')),
    FeatureDefinition("Odor Control", _p(r'\bODOR\sCONTROL\b', r'\bDEODORIZING\b')),
    FeatureDefinition("Anti-Mildew", _p(r'\bANTI-MILDEW\b')),
    FeatureDefinition("Conductive", _p(r'\bCONDUCTIVE\sFABRIC\b')),

    # Surface and hand feel
    FeatureDefinition("Extra Soft", _p(r'\bEXTRA\sSOFT\b', r'\bSUPER\sSOFT\b', r'\bULTRA\sSOFT\b')),
    FeatureDefinition("Cotton Soft", _p(r'\bCOTTON\sSOFT\b')),
    FeatureDefinition("Soft", _p(r'\bSOFT\b'), suppressed_by=("Extra Soft", "Cotton Soft")),
    FeatureDefinition("Smooth", _p(r'\bSMOOTH\b')),
    FeatureDefinition("Silky Feel", _p(r'\bSILKY\sFEEL\b')),
    FeatureDefinition("Matte", _p(r'\bMATTE\b')),
    FeatureDefinition("Glossy", _p(r'\bGLOSSY\b', r'\bSHINY\b')),
    FeatureDefinition("Stiff", _p(r'\bSTIFF\b', r'\bFIRM\b', r'\bHARD\b')),
    FeatureDefinition("Anti-Wrinkle", _p(r'\bANTI-WRINKLE\b', r'\bWRINKLE\sRESISTANT\b')),
    FeatureDefinition("Fleece-Like", _p(r'\bFLEECE-LIKE\b')),
    FeatureDefinition("Velvety", _p(r'\bVELVETY\b', r'\bSUPERFINE\sVELVET\b')),
    FeatureDefinition("Plush", _p(r'\bPLUSH\b')),
    FeatureDefinition("Dust-Free", _p(r'\bDUST-FREE\b', r'\bANTI\sDUST\b')),
    FeatureDefinition("Low Lint", _p(r'\bLOW\sLINT\b')),
    FeatureDefinition("Anti-Pilling", _p(r'\bANTI-PILLING\b')),
    FeatureDefinition("Anti-Stretch", _p(r'\bANTI-STRETCH\b')),

    # Color and appearance treatments
    FeatureDefinition("Printed", _p(r'\bPRINTED\b', r'\bPATTERNED\b'), negations=_neg(r'\bUNPRINTED\b')),
    FeatureDefinition("Two-Tone", _p(r'\bTWO-TONE\b', r'\bBICOLOR\b')),
    FeatureDefinition("Reflective", _p(r'\bREFLECTIVE\b')),
    FeatureDefinition("Fluorescent", _p(r'\bFLUORESCENT\b')),
    FeatureDefinition("Dyed", _p(r'\bDYED\b'), negations=_neg(r'\bUNDYED\b')),
    FeatureDefinition("Colored", _p(r'\bCOLORED\b', r'\bCOLOUR\b'), negations=_neg(r'\bUNCOLORED\b')),

    # Safety and compliance
    FeatureDefinition("Medical Grade", _p(r'\bMEDICAL\sGRADE\b', r'\bMEDICAL\sUSE\b', r'\bAMMI\sLEVEL\s\d+\b')),
    FeatureDefinition("Food Grade", _p(r'\bFOOD\sGRADE\b')),
    FeatureDefinition("Eco-Friendly", _p(r'\bECO-FRIENDLY\b', r'\bRECYCLED\b', r'\bREC\sPOLYESTER\b')),
    FeatureDefinition("Biodegradable", _p(r'\bBIODEGRADABLE\b', r'\bCOMPOSTABLE\b')),
    FeatureDefinition("Waterproof", _p(r'\bWATERPROOF\b', r'\bWPN\sINSOLE\b')),
    FeatureDefinition(
        "Water Resistant",
        _p(r'\bWATER\sRESISTANT\b', r'\bWATER\sREPELLENT\b'),
        suppressed_by=("Waterproof",),
    ),
    FeatureDefinition("Chemical Free", _p(r'\bCHEMICAL\sFREE\b')),
    FeatureDefinition("Dustproof", _p(r'\bDUSTPROOF\b')),

    # Other
    FeatureDefinition("High Tensile Strength", _p(r'\bHIGH\sTENSILE\sSTRENGTH\b')),
    FeatureDefinition("High Elongation", _p(r'\bHIGH\sELONGATION\b')),
    FeatureDefinition("Elasticity", _p(r'\bELASTICITY\b', r'\bSTRETCHY\b')),
    FeatureDefinition("Ultra Lightweight", _p(r'\bULTRA\sLIGHTWEIGHT\b')),
    FeatureDefinition("Lightweight", _p(r'\bLIGHTWEIGHT\b'), suppressed_by=("Ultra Lightweight",)),
    FeatureDefinition("Sound Absorbing", _p(r'\bSOUND\sABSORBING\b', r'\bSOUND\sINSULATING\b', r'\bNOISE-PROOF\b')),
    FeatureDefinition("Heat Insulating", _p(r'\bHEAT\sINSULATING\b', r'\bTHERMAL\sINSULATING\b')),
    FeatureDefinition(
        "Film",
        _p(r'\bFILM\b'),
        negations=_neg(r'NON-WOVEN\sFILM', r'LAMINATED\sPE\sFILM'),
        context_guard=ContextGuard(
            word=re.compile(r'\bFILM\b'),
            phrase=re.compile(r'LAMINATED\s(?:PE\s)?FILM|NON-WOVEN\sFILM'),
            window=20,
            requires_any=("Laminated", "PE Coated"),
        ),
    ),
    FeatureDefinition(
        "Adhesive",
        _p(
            r'\bADHESIVE\b', r'\bGLUE\b', r'\bSELF-ADHESIVE\b', r'\bCONSTRUCTION\sGLUE\b',
            r'\bFABRIC\sGLUE\b', r'\bWITH\sGLUE\b', r'\bGLUED\b', r'\bADHESIVE\sLAYER\b',
            r'\bDOUBLE-SIDED\sTAPE\b',
        ),
        negations=(Negation(re.compile(r'\bNOT\sCOATED\sWITH\sGLUE\b'), retest_without=True),),
    ),
    FeatureDefinition("Fiberfill", _p(r'\bFIBERFILL\b')),
    FeatureDefinition("Mesh", _p(r'\bMESH\b', r'\bWEB\b')),
    FeatureDefinition(
        "Faux Leather",
        _p(r'\bFAUX\sLEATHER\b', r'\bSYNTHETIC\sLEATHER\b', r'\bIMITATION\sLEATHER\b', r'\bLEATHERETTE\b'),
    ),
)

_FEATURES_BY_LABEL = {f.label: f for f in FEATURES}


# ── Color table ────────────────────────────────────────────
# Compound names first; generics list the compounds that suppress them.

def _color(key: str, suppressed_by: tuple[str, ...] = (), label: str = "", pattern: str = "") -> ColorDefinition:
    regex = pattern or r'\b' + r'\s'.join(re.escape(w) for w in key.upper().split()) + r'\b'
    return ColorDefinition(key=key, pattern=re.compile(regex), suppressed_by=suppressed_by, label=label)


COLORS: tuple[ColorDefinition, ...] = (
    _color("Light Beige"),
    _color("Silver Gray"),
    _color("Sky Blue"),
    _color("Pale Mauve"),
    _color("Monk's Robe"),
    _color("Dress Blue"),
    _color("China Blue"),
    _color("Blue Nights"),
    _color("Chateau Rose"),
    _color("Cloud Dancer"),
    _color("Moonlite Mauve"),
    _color("Purple Haze"),
    _color("Love Potion"),
    _color("Baltic Sea"),
    _color("Cloudburst"),
    _color("Orange Popsicle"),
    _color("Purple Rose"),
    _color("Bright White"),
    _color("Cool White"),
    _color("Classic White"),
    _color("Black Beauty"),
    _color("Aspg Grn", label="Green"),
    _color("White", suppressed_by=("Bright White", "Cool White", "Classic White")),
    _color("Black", suppressed_by=("Black Beauty",)),
    _color("Pink"),
    _color("Green", suppressed_by=("Aspg Grn",)),
    _color("Blue", suppressed_by=("Sky Blue", "Dress Blue", "China Blue", "Blue Nights", "Baltic Sea")),
    _color("Gray", suppressed_by=("Silver Gray",)),
    _color("Grey", suppressed_by=("Silver Gray", "Gray")),
    _color("Beige", suppressed_by=("Light Beige",)),
    _color("Turquoise"),
    _color("Charcoal"),
    _color("Cream"),
    _color("Salsa"),
    _color("Fedora"),
    _color("Caviar"),
    _color("Tomato"),
    _color("Humus"),
    _color("Cork"),
    _color("Periscope"),
    _color("Mediterranea"),
)


# ── Helpers ────────────────────────────────────────────────

def _any(patterns, text: str) -> bool:
    return any(p.search(text) for p in patterns)


def _strip(patterns, text: str, replacement: str = "") -> str:
    for p in patterns:
        text = p.sub(replacement, text)
    return text


def _global_negations_for(label: str, desc: str) -> list[GlobalNegation]:
    return [g for g in GLOBAL_NEGATIONS if label in g.labels and g.pattern.search(desc)]


def _mask_global_negations(desc: str) -> str:
    for i, g in enumerate(GLOBAL_NEGATIONS):
        desc = g.pattern.sub(f" G_NEG_{i} ", desc)
    return desc


def _negated(feature: FeatureDefinition, desc: str) -> bool:
    for negation in feature.negations:
        if not negation.pattern.search(desc):
            continue
        if negation.retest_without and _any(feature.triggers, negation.pattern.sub("", desc)):
            continue
        return True
    return False


def _specific_variant_affirmed(feature: FeatureDefinition, desc: str) -> bool:
    return any(
        _any(_FEATURES_BY_LABEL[label].triggers, desc)
        for label in feature.specific_variants
    )


def _globally_negated(feature: FeatureDefinition, trigger: re.Pattern, desc: str) -> bool:
    if not _global_negations_for(feature.label, desc):
        return False
    if _specific_variant_affirmed(feature, desc):
        return False
    return not trigger.search(_mask_global_negations(desc))


def _guarded_out(guard: ContextGuard, labels: frozenset[str], desc: str) -> bool:
    """True when every occurrence of the word sits inside the guarded phrase."""
    if not any(label in labels for label in guard.requires_any):
        return False
    for m in guard.word.finditer(desc):
        window = desc[max(0, m.start() - guard.window):m.end() + guard.window]
        if not guard.phrase.search(window):
            return False
    return True


# ── Pass 1: features ───────────────────────────────────────

def match_features(text) -> frozenset[str]:
    desc = fold(text)
    labels: frozenset[str] = frozenset()
    for feature in FEATURES:
        trigger = next((p for p in feature.triggers if p.search(desc)), None)
        if trigger is None:
            continue
        if _negated(feature, desc):
            continue
        if feature.label in _GLOBAL_KEYWORDS and _globally_negated(feature, trigger, desc):
            continue
        if feature.context_guard and _guarded_out(feature.context_guard, labels, desc):
            continue
        labels = labels | {feature.label}
    return labels


# ── Pass 2: colors ─────────────────────────────────────────

def match_colors(text) -> frozenset[str]:
    desc = fold(text)
    matched: tuple[str, ...] = ()
    for color in COLORS:
        if any(key in matched for key in color.suppressed_by):
            continue
        if color.pattern.search(desc):
            matched = matched + (color.key,)
    by_key = {c.key: c for c in COLORS}
    return frozenset(by_key[key].output for key in matched)


# ── Pass 3: cleanup ────────────────────────────────────────

def _drop_redundant_coated(desc: str, labels: frozenset[str]) -> frozenset[str]:
    if "Coated" not in labels or not any(sc in labels for sc in SPECIFIC_COATINGS):
        return labels
    remainder = _strip(_SPECIFIC_COATING_PHRASES, desc)
    independent = _GLOBAL_KEYWORDS["Coated"].search(remainder) and not _any(_COATING_NEGATED, desc)
    if independent:
        return labels
    if _any(_GLUE_COATING, desc) and "Adhesive" in labels:
        return labels
    return labels - {"Coated"}


def _drop_glue_coated(desc: str, labels: frozenset[str]) -> frozenset[str]:
    if not {"Adhesive", "Coated"} <= labels or not _any(_GLUE_COATING, desc):
        return labels
    if any(sc in labels for sc in SPECIFIC_COATINGS):
        return labels
    remainder = _strip(_GLUE_COATING, desc)
    if _GLOBAL_KEYWORDS["Coated"].search(remainder) and not _any(_COATING_NEGATED, remainder):
        return labels
    return labels - {"Coated"}


def _recheck_global_negations(desc: str, labels: frozenset[str]) -> frozenset[str]:
    negated = set()
    for g in GLOBAL_NEGATIONS:
        if g.pattern.search(desc):
            negated |= g.labels
    if not negated:
        return labels
    # Specific coatings are never negated here, only the generic labels
    masked = _mask_global_negations(desc)
    dropped = {
        label for label in negated & labels
        if not _any(_FEATURES_BY_LABEL[label].triggers, masked)
    }
    return labels - dropped


def _drop_suppressed(labels: frozenset[str]) -> frozenset[str]:
    dropped = {
        f.label for f in FEATURES
        if f.label in labels and any(s in labels for s in f.suppressed_by)
    }
    return labels - dropped


def clean_up(text, labels: frozenset[str]) -> frozenset[str]:
    desc = fold(text)
    labels = _drop_redundant_coated(desc, labels)
    labels = _drop_glue_coated(desc, labels)
    labels = _recheck_global_negations(desc, labels)
    return _drop_suppressed(labels)


# ── Public API ─────────────────────────────────────────────

def add_on_labels(text) -> list[str]:
    """Sorted, de-duplicated labels after all three passes."""
    labels = match_features(text) | match_colors(text)
    return sorted(clean_up(text, labels))


def format_labels(labels: list[str]) -> str:
    if not labels:
        return NO_ADD_ONS
    return "; ".join(labels)


def extract_add_ons(text) -> str:
    """Full-profile ADD ON value, e.g. "Embossed; Hydrophilic; White" or "-"."""
    return format_labels(add_on_labels(text))
