from nonwoven_tagger.addons import (
    FEATURES,
    add_on_labels,
    clean_up,
    extract_add_ons,
    match_colors,
    match_features,
)


# ── Negation ───────────────────────────────────────────────

def test_own_negations():
    result = extract_add_ons("NOT LAMINATED, NOT COATED")
    assert result == "-"
    assert "Laminated" not in result and "Coated" not in result


def test_global_negation_drops_all_named_labels():
    assert extract_add_ons("NOT IMPREGNATED, COATED OR LAMINATED NONWOVEN") == "-"
    assert extract_add_ons("UNIMPREGNATED, UNCOATED, UNLAMINATED") == "-"


def test_global_negation_only_covers_named_labels():
    assert extract_add_ons("NOT IMPREGNATED OR COATED, LAMINATED") == "Laminated"


def test_global_negation_keeps_specific_coating():
    result = extract_add_ons("THERMOPLASTIC ADHESIVE, NOT IMPREGNATED OR COATED")
    assert result == "Adhesive; Thermoplastic Coated"


def test_non_breathable_is_not_breathable():
    assert extract_add_ons("NON-BREATHABLE BACKSHEET") == "Non-Breathable"


# ── Coating cleanup ────────────────────────────────────────

def test_specific_coating_absorbs_generic():
    assert extract_add_ons("PU COATED FABRIC") == "PU Coated"


def test_independent_coated_mention_is_kept():
    assert extract_add_ons("PU COATED, COATED WITH GLUE") == "Adhesive; Coated; PU Coated"


def test_glue_coating_is_adhesive_only():
    assert extract_add_ons("COATED WITH GLUE") == "Adhesive"
    assert extract_add_ons("NOT COATED WITH GLUE") == "-"


def test_adhesive_survives_unrelated_glue_negation():
    assert extract_add_ons("NOT COATED WITH GLUE, SELF-ADHESIVE BACKING") == "Adhesive"


# ── Film guard ─────────────────────────────────────────────

def test_film_inside_laminate_phrase_is_dropped():
    assert extract_add_ons("NONWOVEN LAMINATED PE FILM") == "Laminated"


def test_film_phrases_negate_film_anywhere():
    assert extract_add_ons("PP NON-WOVEN FILM") == "-"
    assert extract_add_ons("LAMINATED PE FILM WITH PROTECTIVE FILM") == "Laminated"
    result = extract_add_ons("LAMINATED PE FILM WITH A PRINTED SURFACE AND PROTECTIVE FILM")
    assert result == "Laminated; Printed"


def test_film_next_to_laminate_is_dropped():
    assert extract_add_ons("LAMINATED FILM ROLL") == "Laminated"


def test_standalone_film_is_kept():
    assert extract_add_ons("PE FILM BAG") == "Film"
    assert extract_add_ons("FILM FACED, LAMINATED") == "Film; Laminated"


# ── Redundancy ─────────────────────────────────────────────

def test_more_specific_label_wins():
    assert extract_add_ons("EXTRA SOFT AND SOFT FABRIC") == "Extra Soft"
    assert extract_add_ons("ULTRA LIGHTWEIGHT") == "Ultra Lightweight"
    assert extract_add_ons("WATERPROOF, WATER RESISTANT") == "Waterproof"


# ── Colors ─────────────────────────────────────────────────

def test_compound_color_suppresses_generic():
    assert extract_add_ons("SKY BLUE AND BLUE") == "Sky Blue"
    assert extract_add_ons("BRIGHT WHITE AND WHITE") == "Bright White"
    assert extract_add_ons("LIGHT BEIGE") == "Light Beige"


def test_gray_beats_grey():
    assert extract_add_ons("GRAY GREY") == "Gray"


def test_color_alias_label():
    assert match_colors("ASPG GRN") == frozenset({"Green"})


# ── Output ─────────────────────────────────────────────────

def test_sorted_and_joined():
    assert extract_add_ons("WHITE HYDROPHILIC EMBOSSED SOFT") == "Embossed; Hydrophilic; Soft; White"
    labels = add_on_labels("SOFT WHITE SOFT WHITE")
    assert labels == sorted(set(labels))


def test_nothing_found():
    assert extract_add_ons("PLAIN ROLL") == "-"
    assert extract_add_ons(None) == "-"
    assert extract_add_ons(float("nan")) == "-"


def test_passes_are_pure():
    desc = "PU COATED SOFT WHITE"
    first = match_features(desc)
    assert match_features(desc) == first
    merged = first | match_colors(desc)
    assert clean_up(desc, merged) == clean_up(desc, merged)
    assert merged == first | match_colors(desc)


def test_feature_labels_are_unique():
    labels = [f.label for f in FEATURES]
    assert len(labels) == len(set(labels))
