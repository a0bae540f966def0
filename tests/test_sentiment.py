from detection_backend.services.sentiment import SentimentAnalyzer, tokenize


def test_tokenize_strips_punctuation():
    assert tokenize("Great!!! Love, peace.") == ["great", "love", "peace"]


def test_negative_sentence():
    result = SentimentAnalyzer().analyze("Destroy India and its economy")
    assert result.score == -3
    assert result.comparative == -3 / 5
    assert result.negative == ["destroy"]
    assert result.positive == []


def test_positive_sentence():
    result = SentimentAnalyzer().analyze("Great!!! love.")
    assert result.score == 6
    assert result.comparative == 3.0
    assert result.positive == ["great", "love"]


def test_negation_flips_polarity():
    result = SentimentAnalyzer().analyze("not good")
    assert result.score == -3
    assert result.negative == ["good"]


def test_empty_text():
    result = SentimentAnalyzer().analyze("")
    assert result.score == 0
    assert result.comparative == 0.0


def test_custom_lexicon():
    analyzer = SentimentAnalyzer(lexicon={"meh": -1}, negators=[])
    assert analyzer.analyze("meh meh").score == -2


def test_devanagari_words_stay_whole():
    assert tokenize("destroy भारत भारत भारत") == ["destroy", "भारत", "भारत", "भारत"]


def test_devanagari_tokens_count_towards_comparative():
    result = SentimentAnalyzer().analyze("destroy भारत भारत भारत")
    assert result.score == -3
    assert result.comparative == -0.75
