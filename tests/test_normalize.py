import unittest
from services.resolver.normalize import (
    normalize, edit_distance, similarity, is_ticker_shaped, strip_spaces_and_punctuation
)


class TestNormalize(unittest.TestCase):
    def test_punctuation_case_and_spaces(self):
        self.assertEqual(normalize("  Nvidia, Inc. "), "nvidiainc")
        self.assertEqual(normalize("AT&T"), "att")
        self.assertEqual(normalize("O'Reilly (Auto)-Parts"), "oreillyautoparts")
        self.assertEqual(normalize('"Meta"\t  Platforms'), "metaplatforms")

    def test_variants_share_a_key(self):
        self.assertEqual(normalize("Apple Inc."), normalize("apple   inc"))
        self.assertEqual(normalize("amazon.com"), "amazoncom")

    def test_non_string(self):
        self.assertEqual(normalize(None), "")
        self.assertEqual(normalize(42), "")

    def test_normalized_key_is_stable(self):
        key = normalize("Berkshire Hathaway, Inc.")
        self.assertEqual(normalize(key), key)


class TestEditDistance(unittest.TestCase):
    def test_classic_pairs(self):
        self.assertEqual(edit_distance("kitten", "sitting"), 3)
        self.assertEqual(edit_distance("flaw", "lawn"), 2)
        self.assertEqual(edit_distance("abc", "abc"), 0)

    def test_empty(self):
        self.assertEqual(edit_distance("", "abc"), 3)
        self.assertEqual(edit_distance("abc", ""), 3)
        self.assertEqual(edit_distance("", ""), 0)

    def test_symmetric(self):
        self.assertEqual(edit_distance("nvidia", "nvda"), edit_distance("nvda", "nvidia"))


class TestSimilarity(unittest.TestCase):
    def test_bounds(self):
        self.assertEqual(similarity("abc", "abc"), 1.0)
        self.assertEqual(similarity("abc", "xyz"), 0.0)

    def test_both_empty(self):
        self.assertEqual(similarity("", ""), 1.0)

    def test_ratio(self):
        self.assertAlmostEqual(similarity("nvidia", "nvidiainc"), 6 / 9)
        # 7 edits over 20 chars is exactly 0.65
        self.assertEqual(similarity("abcdefghijklmnopqrst", "abcdefghijklmzzzzzzz"), 0.65)


class TestTickerShape(unittest.TestCase):
    def test_tickers(self):
        for s in ("NVDA", "nvda", "V", "GOOGL", "BRK.B", "brk.a", "RDS.AB"):
            self.assertTrue(is_ticker_shaped(s), s)

    def test_not_tickers(self):
        for s in ("NVIDIA", "BRK.BBB", "NV DA", "123", "AB1", "", "NVDA\n", ".B"):
            self.assertFalse(is_ticker_shaped(s), s)
        self.assertFalse(is_ticker_shaped(None))

    def test_strip_spaces_and_punctuation(self):
        self.assertEqual(strip_spaces_and_punctuation("N V D A"), "NVDA")
        self.assertEqual(strip_spaces_and_punctuation("brk.b"), "BRKB")


if __name__ == "__main__":
    unittest.main()
