import os
import sys
import unittest

# Ensure project src/ is on sys.path for imports
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
src_path = os.path.join(ROOT, "src")
if src_path not in sys.path:
    sys.path.insert(0, src_path)

from store.fuzzy import (  # noqa: E402
    BitapMatcher,
    WeightedKey,
    bitap_search,
    field_norm,
    field_values,
    match_text,
    normalize_weights,
    ranked,
    resolve_path,
)


class Obj:
    def __init__(self, **kwargs):
        self.__dict__.update(kwargs)


class HelpersTestCase(unittest.TestCase):
    def test_resolve_path_mixes_mappings_and_attributes(self):
        record = Obj(name="Shirt", category=Obj(name="Tops"), meta={"sku": "A1"})
        self.assertEqual(resolve_path(record, "category.name"), "Tops")
        self.assertEqual(resolve_path(record, "meta.sku"), "A1")
        self.assertIsNone(resolve_path(record, "missing.name"))
        self.assertIsNone(resolve_path({"category": None}, "category.name"))

    def test_field_values_skips_blank_and_stringifies(self):
        self.assertEqual(field_values({"x": None}, "x"), [])
        self.assertEqual(field_values({"x": "   "}, "x"), [])
        self.assertEqual(field_values({"x": 42}, "x"), ["42"])
        self.assertEqual(field_values({"x": ["a", None, "b"]}, "x"), ["a", "b"])

    def test_field_norm_by_token_count(self):
        self.assertEqual(field_norm("shirt"), 1.0)
        self.assertEqual(field_norm("blue cotton shirt lovely"), 0.5)

    def test_normalize_weights_sums_to_one(self):
        keys = normalize_weights([WeightedKey("a", 2), WeightedKey("b", 2)])
        self.assertEqual([k.weight for k in keys], [0.5, 0.5])


class BitapTestCase(unittest.TestCase):
    def test_exact_prefix_scores_near_zero(self):
        is_match, score = bitap_search("shirt", "shirt", 0.4)
        self.assertTrue(is_match)
        self.assertAlmostEqual(score, 0.001)

    def test_substitution_typo_matches_within_threshold(self):
        is_match, score = bitap_search("shirt", "shirp", 0.4)
        self.assertTrue(is_match)
        self.assertAlmostEqual(score, 0.2)

    def test_unrelated_text_does_not_match(self):
        is_match, _ = bitap_search("blue shirt", "xyzq", 0.4)
        self.assertFalse(is_match)

    def test_far_occurrence_is_penalized(self):
        near = bitap_search("shirt" + " " * 5, "shirt", 0.6)
        far = bitap_search(" " * 30 + "shirt", "shirt", 0.6)
        self.assertTrue(near[0] and far[0])
        self.assertLess(near[1], far[1])

    def test_match_text_is_case_insensitive_and_exact_is_zero(self):
        self.assertEqual(match_text("Shirt", "sHIRT", 0.4), (True, 0.0))

    def test_long_patterns_are_chunked(self):
        text = "an extremely long product description that goes on and on"
        is_match, score = match_text(text, text[:40], 0.4)
        self.assertTrue(is_match)
        self.assertLess(score, 0.4)


class MatcherTestCase(unittest.TestCase):
    def setUp(self):
        self.matcher = BitapMatcher()
        self.keys = [WeightedKey("name"), WeightedKey("description")]

    def test_search_ranks_best_first(self):
        records = [
            {"name": "Plain cotton tee", "description": "a classic shirt for everyday"},
            {"name": "Shirt", "description": ""},
            {"name": "Sandals", "description": ""},
        ]
        matches = self.matcher.search(records, self.keys, "shirt", 0.4)
        self.assertEqual([m.index for m in matches][0], 1)
        self.assertNotIn(2, [m.index for m in matches])
        self.assertEqual(ranked(matches)[0]["name"], "Shirt")

    def test_ties_keep_input_order(self):
        records = [{"name": "Hat"}, {"name": "hat"}, {"name": "HAT"}]
        matches = self.matcher.search(records, [WeightedKey("name")], "hat", 0.3)
        self.assertEqual([m.index for m in matches], [0, 1, 2])

    def test_record_without_matching_fields_is_excluded(self):
        self.assertIsNone(
            self.matcher.score_record({"name": None}, self.keys, "shirt", 0.4)
        )

    def test_list_fields_match_element_wise(self):
        records = [{"name": "Bag", "tags": ["leather", "brown"]}, {"name": "Cap"}]
        matches = self.matcher.search(records, [WeightedKey("tags")], "brown", 0.3)
        self.assertEqual([m.index for m in matches], [0])


if __name__ == "__main__":
    unittest.main()
