"""Lexicon sentiment scoring (AFINN-style integer word polarities)"""
import re
from typing import Dict, Iterable, List, Optional

from detection_backend.models.schemas import SentimentResult

# word -> polarity in [-5, 5]
LEXICON: Dict[str, int] = {
    # negative
    'abandon': -2, 'abuse': -3, 'abused': -3, 'abusive': -3, 'agonise': -3,
    'angry': -3, 'anger': -3, 'annoy': -2, 'annoyed': -2, 'annoying': -2,
    'arrogant': -2, 'ashamed': -2, 'attack': -1, 'attacked': -1, 'awful': -3,
    'bad': -3, 'betray': -3, 'betrayed': -3, 'bitter': -2, 'blame': -2,
    'bloody': -3, 'bomb': -1, 'boycott': -2, 'broken': -1, 'brutal': -3,
    'burn': -1, 'chaos': -2, 'cheat': -3, 'collapse': -2, 'conspiracy': -3,
    'corrupt': -3, 'corruption': -3, 'coward': -2, 'crap': -3, 'crash': -2,
    'crime': -3, 'criminal': -3, 'crisis': -3, 'cruel': -3, 'damn': -4,
    'danger': -2, 'dangerous': -2, 'dead': -3, 'death': -2, 'destroy': -3,
    'destroyed': -3, 'destruction': -3, 'die': -3, 'dirty': -2, 'disaster': -2,
    'disgrace': -2, 'disgusting': -3, 'dishonest': -2, 'doom': -2, 'enemy': -2,
    'evil': -3, 'exploit': -2, 'fail': -2, 'failed': -2, 'failure': -2,
    'fake': -3, 'false': -1, 'fear': -2, 'fight': -1, 'filthy': -3,
    'fool': -2, 'fraud': -4, 'furious': -3, 'greed': -3, 'guilty': -3,
    'hate': -3, 'hated': -3, 'hatred': -3, 'horrible': -3, 'hostile': -2,
    'humiliate': -3, 'hurt': -2, 'idiot': -3, 'ignorant': -2, 'illegal': -3,
    'kill': -3, 'killed': -3, 'killing': -3, 'liar': -3, 'lie': -2,
    'lies': -2, 'loser': -3, 'mad': -3, 'murder': -2, 'nasty': -3,
    'oppression': -2, 'pathetic': -2, 'poor': -2, 'propaganda': -2, 'racist': -3,
    'rage': -2, 'riot': -2, 'ruin': -2, 'ruined': -2, 'sad': -2,
    'scam': -2, 'shame': -2, 'shameful': -2, 'sick': -2, 'stupid': -2,
    'terrible': -3, 'terror': -3, 'terrorism': -2, 'terrorist': -2, 'threat': -2,
    'traitor': -3, 'ugly': -3, 'violence': -3, 'violent': -3, 'war': -2,
    'weak': -2, 'worst': -3, 'worthless': -2, 'wrong': -2,
    # positive
    'admire': 3, 'amazing': 4, 'awesome': 4, 'beautiful': 3, 'best': 3,
    'better': 2, 'bless': 2, 'brave': 2, 'brilliant': 4, 'celebrate': 3,
    'cheer': 2, 'clean': 2, 'great': 3, 'excellent': 3, 'fantastic': 4,
    'free': 1, 'friend': 1, 'friendly': 2, 'glad': 3, 'glorious': 2,
    'good': 3, 'grateful': 3, 'happy': 3, 'harmony': 2, 'help': 2,
    'hero': 2, 'honest': 2, 'honor': 2, 'hope': 2, 'inspire': 2,
    'joy': 3, 'kind': 2, 'like': 2, 'love': 3, 'loved': 3,
    'lovely': 3, 'nice': 3, 'peace': 2, 'peaceful': 2, 'pride': 2,
    'proud': 2, 'prosper': 3, 'rich': 2, 'safe': 1, 'strong': 2,
    'success': 2, 'support': 2, 'thank': 2, 'thanks': 2, 'trust': 1,
    'unity': 1, 'victory': 3, 'welcome': 2, 'win': 4, 'wonderful': 4,
}

# a negator immediately before a word flips its polarity
NEGATORS = {
    "not", "no", "never", "dont", "don't", "doesnt", "doesn't", "isnt", "isn't",
    "wasnt", "wasn't", "cant", "can't", "cannot", "wont", "won't", "without",
}

# ASCII punctuation except apostrophe and hyphen; combining marks of
# Devanagari and Arabic script stay inside their words
_PUNCTUATION = re.compile(r'[!"#$%&()*+,./:;<=>?@\[\\\]^_`{|}~]')


def tokenize(text: str) -> List[str]:
    """Lower-case, strip ASCII punctuation, split on whitespace"""
    return _PUNCTUATION.sub(" ", text.lower()).split()


class SentimentAnalyzer:
    """Sums word polarities and normalises by token count"""

    def __init__(self, lexicon: Optional[Dict[str, int]] = None, negators: Optional[Iterable[str]] = None):
        self.lexicon = dict(LEXICON if lexicon is None else lexicon)
        self.negators = set(NEGATORS if negators is None else negators)

    def analyze(self, text: str) -> SentimentResult:
        tokens = tokenize(text)
        score = 0
        positive: List[str] = []
        negative: List[str] = []

        for i, token in enumerate(tokens):
            polarity = self.lexicon.get(token)
            if not polarity:
                continue
            if i > 0 and tokens[i - 1] in self.negators:
                polarity = -polarity
            score += polarity
            if polarity > 0:
                positive.append(token)
            else:
                negative.append(token)

        comparative = score / len(tokens) if tokens else 0.0
        return SentimentResult(
            score=score,
            comparative=comparative,
            positive=positive,
            negative=negative,
        )
