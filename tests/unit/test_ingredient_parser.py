import pytest

from petfood_catalog.services.ingredient_processor import extract_percentage, parse_ingredient_list


class TestParseIngredientList:

    @pytest.mark.parametrize("text", ["", "   ", None, "\n\t"])
    def test_blank_input_returns_empty_list(self, text):
        assert parse_ingredient_list(text) == []

    def test_three_ingredients_with_inline_percentage(self):
        parsed = parse_ingredient_list("Chicken, Brown Rice 25%, Peas")

        assert [p.position for p in parsed] == [1, 2, 3]
        assert [p.name for p in parsed] == ["Chicken", "Brown Rice 25%", "Peas"]
        assert parsed[0].percentage is None
        assert parsed[1].percentage == 25
        assert parsed[2].percentage is None
        assert all(p.is_primary for p in parsed)

    def test_first_five_are_primary(self):
        parsed = parse_ingredient_list("A, B, C, D, E, F, G, H")

        assert len(parsed) == 8
        assert [p.is_primary for p in parsed] == [True] * 5 + [False] * 3

    def test_semicolons_and_commas_both_split(self):
        parsed = parse_ingredient_list("Salmon; Oatmeal, Barley;Flaxseed")
        assert [p.name for p in parsed] == ["Salmon", "Oatmeal", "Barley", "Flaxseed"]

    def test_empty_tokens_dropped_and_positions_stay_contiguous(self):
        parsed = parse_ingredient_list("Lamb,, Rice ; ;Carrots,")

        assert [p.name for p in parsed] == ["Lamb", "Rice", "Carrots"]
        assert [p.position for p in parsed] == [1, 2, 3]

    def test_order_is_preserved(self):
        parsed = parse_ingredient_list("Zucchini, Apple, Mango")
        assert [p.name for p in parsed] == ["Zucchini", "Apple", "Mango"]

    def test_name_keeps_percentage_text(self):
        parsed = parse_ingredient_list("Deboned Turkey (32 %)")

        assert parsed[0].name == "Deboned Turkey (32 %)"
        assert parsed[0].percentage == 32

    def test_primary_count_can_be_overridden(self):
        parsed = parse_ingredient_list("A, B, C", primary_count=2)
        assert [p.is_primary for p in parsed] == [True, True, False]


class TestExtractPercentage:

    @pytest.mark.parametrize("token,expected", [
        ("Chicken 30%", 30.0),
        ("Fish oil 1.5 %", 1.5),
        ("min. 4% beef", 4.0),
        ("Chicken", None),
        ("Vitamin E 50mg", None),
    ])
    def test_extracts_first_percentage(self, token, expected):
        assert extract_percentage(token) == expected
