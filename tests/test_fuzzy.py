import unittest
from services.resolver.catalog import SymbolTable
from services.resolver.fuzzy import fuzzy_match


class TestFuzzyMatch(unittest.TestCase):
    def setUp(self):
        self.one = SymbolTable(seed=(("abcdefghijklmnopqrst", "ABC", "NYSE", 0.9),))

    def test_threshold_is_inclusive(self):
        out = fuzzy_match("abcdefghijklmzzzzzzz", self.one, 0.65)
        self.assertEqual(len(out), 1)
        self.assertEqual(out[0].confidence, 0.65)

    def test_below_threshold_excluded(self):
        self.assertEqual(fuzzy_match("abcdefghijklzzzzzzzz", self.one, 0.65), [])
        self.assertEqual(fuzzy_match("abcdefghijklmzzzzzzz", self.one, 0.650001), [])

    def test_ranked_by_similarity(self):
        t = SymbolTable(seed=(
            ("alphb", "TWO", "NYSE", 0.9),
            ("alphaa", "THREE", "NYSE", 0.9),
            ("alpha", "ONE", "NYSE", 0.9),
        ))
        out = fuzzy_match("alpha", t, 0.65)
        self.assertEqual([c.ticker for c in out], ["ONE", "THREE", "TWO"])
        self.assertEqual(out[0].confidence, 1.0)
        self.assertEqual(out[0].resolved_from, "fuzzy_match")
        self.assertEqual(out[0].name, "alpha")

    def test_ties_keep_catalog_order(self):
        seed = (("abcd", "X", "NYSE", 0.9), ("abce", "Y", "NYSE", 0.9))
        self.assertEqual([c.ticker for c in fuzzy_match("abcf", SymbolTable(seed=seed))], ["X", "Y"])
        rev = tuple(reversed(seed))
        self.assertEqual([c.ticker for c in fuzzy_match("abcf", SymbolTable(seed=rev))], ["Y", "X"])

    def test_seed_catalog_typo(self):
        out = fuzzy_match("microsofts", SymbolTable())
        self.assertEqual(len(out), 1)
        self.assertEqual(out[0].ticker, "MSFT")
        self.assertAlmostEqual(out[0].confidence, 0.9)


if __name__ == "__main__":
    unittest.main()
