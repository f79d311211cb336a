from nonwoven_tagger.width import extract_width


def test_value_wide():
    assert extract_width('60" WIDE') == "152.40"
    assert extract_width("150CM WIDE") == "150.00"
    assert extract_width("1.6 M WIDE ROLL") == "160.00"


def test_keyword_without_number_returns_sentinel():
    assert extract_width("NO WIDTH INFO") == "N/A"
    assert extract_width("") == "N/A"
    assert extract_width(None) == "N/A"


def test_width_value_forms():
    assert extract_width("WIDTH: 1.6M") == "160.00"
    assert extract_width("WIDTH=210MM") == "21.00"
    assert extract_width("SMS WIDTH 160CM 25GSM") == "160.00"
    assert extract_width("WIDTH 1,5 M") == "150.00"


def test_width_without_unit_is_centimeters():
    assert extract_width("WIDTH: 175") == "175.00"


def test_cut_width_beats_plain_width():
    assert extract_width("CUT WIDTH 25CM, WIDTH 160CM") == "25.00"
    assert extract_width("EDGE WIDTH: 5MM") == "0.50"


def test_width_from_range_takes_lower_bound():
    assert extract_width("WIDTH FROM 10 TO 20CM") == "10.00"
    assert extract_width("WIDTH FROM 100CM - 200CM") == "100.00"


def test_bracketed_range_takes_lower_bound():
    assert extract_width("WIDTH [150-160]CM") == "150.00"
    assert extract_width("WIDTH: (20 ~ 30 INCH)") == "50.80"


def test_dual_units_take_first_number():
    assert extract_width('WIDTH 60" (152CM)') == "152.40"
    assert extract_width("40 INCH (101.6CM) WIDE") == "101.60"


def test_length_by_width_takes_second_number():
    assert extract_width("SIZE (LENGTH*WIDTH): 100*50CM") == "50.00"
    assert extract_width("LENGTH X WIDTH: 200 X 30 CM") == "30.00"


def test_keyword_present_falls_back_to_unit_priority():
    # No number next to WIDTH; inches outrank centimeters
    assert extract_width("WIDTH AS ORDERED, 90CM ROLL ON 3 INCH CORE") == "7.62"


def test_fallback_spaced_token():
    assert extract_width("NONWOVEN 60 INCH ROLL") == "152.40"
    assert extract_width("3 CM TAPE") == "3.00"


def test_fallback_concatenated_token():
    assert extract_width("SMS 25GSM 160CM") == "160.00"
    assert extract_width("PP TAPE 50MM") == "5.00"


def test_fallback_embedded_token():
    assert extract_width("ROLL150CMX") == "150.00"


def test_mm_next_to_gram_unit_is_ignored():
    assert extract_width("30G50MM") == "N/A"
    assert extract_width("50MMG") == "N/A"


def test_always_two_decimals():
    for desc in ('60" WIDE', "WIDTH 1M", "2.5 CM", "ROLL 7 INCH"):
        value = extract_width(desc)
        assert value.count(".") == 1
        assert len(value.split(".")[1]) == 2


def test_unbracketed_range_uses_unit_after_second_number():
    assert extract_width("WIDTH: 60-62 INCH") == "152.40"
    assert extract_width("60-62 INCH WIDE") == "152.40"
    assert extract_width("WIDTH 150 ~ 160CM") == "150.00"


def test_roll_length_is_not_a_width():
    assert extract_width("SPUNBOND 25GSM 1000M/ROLL") == "N/A"
    assert extract_width("3 YARDS") == "N/A"
    assert extract_width("500 M ROLL, 160CM") == "160.00"


def test_long_units_still_count_next_to_width_keyword():
    assert extract_width("WIDTH 2 YD") == "182.88"
    assert extract_width("3 FT WIDE") == "91.44"
