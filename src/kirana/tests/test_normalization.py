"""
Unit tests for kirana.extraction.normalization.
"""
import pytest

from kirana.extraction.normalization import normalize, normalize_transcript


class TestNormalize:
    """Tests for the canonical matching form."""

    def test_lowercases_and_folds_punctuation(self):
        """Test case and sentence punctuation are removed."""
        assert normalize("  10 KG അരി,  2 kg പഞ്ചസാര! ") == "10 kg അരി 2 kg പഞ്ചസാര"

    def test_case_variants_collapse(self):
        """Test differently cased spellings normalize identically."""
        assert normalize("Rice") == normalize("RICE") == "rice"

    def test_empty_input(self):
        """Test empty and None inputs."""
        assert normalize("") == ""
        assert normalize(None) == ""

    def test_whitespace_only(self):
        """Test whitespace-only input normalizes to empty."""
        assert normalize("  \t \n ") == ""

    @pytest.mark.parametrize("text", [
        "10 KG അരി, 2 kg പഞ്ചസാര",
        "ടോട്ടൽ എത്ര?",
        "Coconut Oil; 2 L!",
        "  ചുവന്ന   അരി  ",
    ])
    def test_idempotent(self, text):
        """Test normalizing twice changes nothing."""
        once = normalize(text)
        assert normalize(once) == once

    def test_malayalam_code_points_untouched(self):
        """Test combining marks survive normalization."""
        assert normalize("വെളിച്ചെണ്ണ") == "വെളിച്ചെണ്ണ"


class TestNormalizeTranscript:
    """Tests for speech-to-text rewrites."""

    @pytest.mark.parametrize("spoken,expected", [
        ("യുപിഐ", "UPI"),
        ("യു പി ഐ", "UPI"),
        ("ക്യാഷ്", "cash"),
        ("ഗൂഗിൾ പേ", "GPay"),
        ("ക്യു ആർ", "QR"),
    ])
    def test_payment_words(self, spoken, expected):
        """Test Malayalam spellings of English payment words are rewritten."""
        assert normalize_transcript(spoken) == expected

    def test_rest_of_utterance_unchanged(self):
        """Test separators and case survive for the segmenter."""
        text = "10 kg അരി, 2 kg പഞ്ചസാര"
        assert normalize_transcript(text) == text

    def test_rewrite_inside_sentence(self):
        """Test a rewrite inside a longer utterance keeps the rest."""
        assert normalize_transcript("യുപിഐ ചെയ്യാം") == "UPI ചെയ്യാം"

    def test_empty(self):
        """Test empty input."""
        assert normalize_transcript("") == ""
