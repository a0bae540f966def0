"""
Bag-of-words text classifier
Logistic regression trained once at construction over a small labelled set
"""
import re
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np

POSITIVE_LABEL = "anti-india"
NEUTRAL_LABEL = "neutral"

TRAINING_DATA: Tuple[Tuple[str, str], ...] = (
    ("India is a great nation with rich culture", NEUTRAL_LABEL),
    ("Destroy India and its economy", POSITIVE_LABEL),
    ("Love Pakistan hate India", POSITIVE_LABEL),
    ("Indian festivals are beautiful", NEUTRAL_LABEL),
    ("Spread fake news about India", POSITIVE_LABEL),
)

# \w alone splits Devanagari and Arabic words at their vowel signs
_WORD = re.compile(r"[\w\u0900-\u0963\u0966-\u097F\u0610-\u061A\u064B-\u065F\u0670\u06D6-\u06ED]+")


def _tokens(text: str) -> List[str]:
    return _WORD.findall(text.lower())


class TextClassifier:
    """
    Binary logistic regression over binary bag-of-words features

    No bias term: text sharing no vocabulary with the training set scores
    exactly 0.5 and falls back to the neutral label.
    """

    def __init__(
        self,
        training_data: Sequence[Tuple[str, str]] = TRAINING_DATA,
        positive_label: str = POSITIVE_LABEL,
        neutral_label: str = NEUTRAL_LABEL,
        learning_rate: float = 0.5,
        iterations: int = 500,
    ):
        if not training_data:
            raise ValueError("training_data must not be empty")
        self.positive_label = positive_label
        self.neutral_label = neutral_label
        self.vocabulary: Dict[str, int] = {}
        self.weights: Optional[np.ndarray] = None
        self._train(training_data, learning_rate, iterations)

    def _vectorize(self, text: str) -> np.ndarray:
        features = np.zeros(len(self.vocabulary))
        for token in _tokens(text):
            index = self.vocabulary.get(token)
            if index is not None:
                features[index] = 1.0
        return features

    def _train(self, training_data: Sequence[Tuple[str, str]], learning_rate: float, iterations: int) -> None:
        for text, _ in training_data:
            for token in _tokens(text):
                self.vocabulary.setdefault(token, len(self.vocabulary))

        X = np.vstack([self._vectorize(text) for text, _ in training_data])
        y = np.array([1.0 if label == self.positive_label else 0.0 for _, label in training_data])

        weights = np.zeros(X.shape[1])
        for _ in range(iterations):
            predictions = 1.0 / (1.0 + np.exp(-X.dot(weights)))
            gradient = X.T.dot(predictions - y) / len(y)
            weights -= learning_rate * gradient
        self.weights = weights

    def probability(self, text: str) -> float:
        """Probability of the positive label"""
        z = float(self._vectorize(text).dot(self.weights))
        return float(1.0 / (1.0 + np.exp(-z)))

    def classify(self, text: str) -> str:
        return self.positive_label if self.probability(text) > 0.5 else self.neutral_label
