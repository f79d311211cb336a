from nonwoven_tagger.gsm import extract_gsm


def test_gsm_suffix():
    assert extract_gsm("80GSM FABRIC") == "80"
    assert extract_gsm("SPUNBOND 12,5 GSM WHITE") == "12.5"


def test_weight_keyword_with_bare_g():
    assert extract_gsm("WEIGHT: 15G NONWOVEN") == "15"
    assert extract_gsm("BASIS WEIGHT 18G") == "18"
    assert extract_gsm("average weight 22 g") == "22"


def test_no_weight_returns_sentinel():
    assert extract_gsm("NO NUMBERS HERE") == "N/A"
    assert extract_gsm("") == "N/A"


def test_non_string_input_is_empty():
    assert extract_gsm(None) == "N/A"
    assert extract_gsm(12.0) == "N/A"
    assert extract_gsm(float("nan")) == "N/A"


def test_pattern_priority_first_hit_wins():
    # G/M2 outranks GSM even when GSM comes first in the text
    assert extract_gsm("15 GSM CORE, 80 G/M2 FABRIC") == "80"
    assert extract_gsm("25 GR/M2 SMS") == "25"


def test_kimlon_and_type_forms():
    assert extract_gsm("30G KIMLON") == "30"
    assert extract_gsm("45 G TYPE A") == "45"


def test_bare_grams_not_followed_by_a_word():
    assert extract_gsm("ROLL 20G, WHITE") == "20"
    assert extract_gsm("HYDROPHILIC 17 G") == "17"
    # "20 G WHITE" reads as a word after G, not a weight
    assert extract_gsm("ROLL 20 G WHITE") == "N/A"


def test_grams_per_yard_is_last_resort():
    assert extract_gsm("3.5 GR/YD") == "3.5"


def test_repeated_calls_are_identical():
    desc = "SMS 25 G/M2 WIDTH 160CM"
    assert len({extract_gsm(desc) for _ in range(5)}) == 1


def test_bare_grams_before_e_m_r_words():
    assert extract_gsm("25G MELTBLOWN") == "25"
    assert extract_gsm("20G ROLL") == "20"
    assert extract_gsm("18 G EMBOSSED") == "18"
