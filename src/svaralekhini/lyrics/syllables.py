"""Lyric text -> lines and syllables, with IAST transliteration.

English syllables are the whitespace/hyphen separated tokens the singer
typed. Indic scripts are split into aksaras: a syllable starts at every
consonant or independent vowel that does not follow a virama, so conjuncts
and vowel signs stay attached to their consonant.
"""

import re

from svaralekhini.types import Language

# Offsets shared by the Devanagari, Kannada and Telugu Unicode blocks
_VOWEL_RANGE = range(0x05, 0x15)
_CONSONANT_RANGE = range(0x15, 0x3A)
_VIRAMA = 0x4D

_SCRIPT_BLOCKS = {
    Language.HINDI: 0x0900,
    Language.SANSKRIT: 0x0900,
    Language.KANNADA: 0x0C80,
    Language.TELUGU: 0x0C00,
}

_ENGLISH_SPLIT = re.compile(r"[\s\-]+")
_INDIC_WORD_SPLIT = re.compile(r"[\s\-।॥]+")

_DEVANAGARI_IAST = {
    "अ": "a", "आ": "ā", "इ": "i", "ई": "ī", "उ": "u", "ऊ": "ū",
    "ऋ": "ṛ", "ॠ": "ṝ", "ऌ": "ḷ", "ॡ": "ḹ", "ए": "e", "ऐ": "ai",
    "ओ": "o", "औ": "au", "क": "ka", "ख": "kha", "ग": "ga", "घ": "gha",
    "ङ": "ṅa", "च": "ca", "छ": "cha", "ज": "ja", "झ": "jha", "ञ": "ña",
    "ट": "ṭa", "ठ": "ṭha", "ड": "ḍa", "ढ": "ḍha", "ण": "ṇa",
    "त": "ta", "थ": "tha", "द": "da", "ध": "dha", "न": "na",
    "प": "pa", "फ": "pha", "ब": "ba", "भ": "bha", "म": "ma",
    "य": "ya", "र": "ra", "ल": "la", "व": "va", "श": "śa",
    "ष": "ṣa", "स": "sa", "ह": "ha",
}

_KANNADA_IAST = {
    "ಅ": "a", "ಆ": "ā", "ಇ": "i", "ಈ": "ī", "ಉ": "u", "ಊ": "ū",
    "ಋ": "ṛ", "ೠ": "ṝ", "ಌ": "ḷ", "ೡ": "ḹ", "ಎ": "e", "ಏ": "ē",
    "ಐ": "ai", "ಒ": "o", "ಓ": "ō", "ಔ": "au", "ಕ": "ka", "ಖ": "kha",
    "ಗ": "ga", "ಘ": "gha", "ಙ": "ṅa", "ಚ": "ca", "ಛ": "cha",
    "ಜ": "ja", "ಝ": "jha", "ಞ": "ña", "ಟ": "ṭa", "ಠ": "ṭha",
    "ಡ": "ḍa", "ಢ": "ḍha", "ಣ": "ṇa", "ತ": "ta", "ಥ": "tha",
    "ದ": "da", "ಧ": "dha", "ನ": "na", "ಪ": "pa", "ಫ": "pha",
    "ಬ": "ba", "ಭ": "bha", "ಮ": "ma", "ಯ": "ya", "ರ": "ra",
    "ಲ": "la", "ವ": "va", "ಶ": "śa", "ಷ": "ṣa", "ಸ": "sa", "ಹ": "ha",
}

_TELUGU_IAST = {
    "అ": "a", "ఆ": "ā", "ఇ": "i", "ఈ": "ī", "ఉ": "u", "ఊ": "ū",
    "ఋ": "ṛ", "ౠ": "ṝ", "ఌ": "ḷ", "ౡ": "ḹ", "ఎ": "e", "ఏ": "ē",
    "ఐ": "ai", "ఒ": "o", "ఓ": "ō", "ఔ": "au", "క": "ka", "ఖ": "kha",
    "గ": "ga", "ఘ": "gha", "ఙ": "ṅa", "చ": "ca", "ఛ": "cha",
    "జ": "ja", "ఝ": "jha", "ఞ": "ña", "ట": "ṭa", "ఠ": "ṭha",
    "డ": "ḍa", "ఢ": "ḍha", "ణ": "ṇa", "త": "ta", "థ": "tha",
    "ద": "da", "ధ": "dha", "న": "na", "ప": "pa", "ఫ": "pha",
    "బ": "ba", "భ": "bha", "మ": "ma", "య": "ya", "ర": "ra",
    "ల": "la", "వ": "va", "శ": "śa", "ష": "ṣa", "స": "sa", "హ": "ha",
}

_IAST_TABLES = {
    Language.HINDI: _DEVANAGARI_IAST,
    Language.SANSKRIT: _DEVANAGARI_IAST,
    Language.KANNADA: _KANNADA_IAST,
    Language.TELUGU: _TELUGU_IAST,
}

# Dependent vowel signs by block offset; they replace a consonant's inherent "a".
# Virama (0x4D) removes it.
_DEVANAGARI_SIGNS = {
    0x3E: "ā", 0x3F: "i", 0x40: "ī", 0x41: "u", 0x42: "ū", 0x43: "ṛ", 0x44: "ṝ",
    0x47: "e", 0x48: "ai", 0x4B: "o", 0x4C: "au", _VIRAMA: "",
}
_DRAVIDIAN_SIGNS = {
    0x3E: "ā", 0x3F: "i", 0x40: "ī", 0x41: "u", 0x42: "ū", 0x43: "ṛ", 0x44: "ṝ",
    0x46: "e", 0x47: "ē", 0x48: "ai", 0x4A: "o", 0x4B: "ō", 0x4C: "au", _VIRAMA: "",
}
_MARKS = {0x02: "ṃ", 0x03: "ḥ"}


def split_lines(text: str) -> list[str]:
    """Split lyrics into non-blank lines, stripped."""
    return [line.strip() for line in text.splitlines() if line.strip()]


def _block_offset(char: str, base: int) -> int | None:
    offset = ord(char) - base
    return offset if 0 <= offset < 0x80 else None


def split_aksaras(word: str, base: int) -> list[str]:
    """Split one Indic word into aksaras for the script starting at ``base``."""
    syllables: list[str] = []
    current = ""
    prev_offset = None

    for char in word:
        offset = _block_offset(char, base)
        starts_syllable = (
            offset is not None
            and (offset in _CONSONANT_RANGE or offset in _VOWEL_RANGE)
            and prev_offset != _VIRAMA
        )
        if starts_syllable and current:
            syllables.append(current)
            current = ""
        current += char
        prev_offset = offset

    if current:
        syllables.append(current)
    return syllables or [word]


def split_syllables(text: str, language: Language | str = Language.ENGLISH) -> list[str]:
    """Split one lyric line into syllables for the given language."""
    language = Language(language)
    if not language.is_indic:
        return [s for s in _ENGLISH_SPLIT.split(text) if s]

    base = _SCRIPT_BLOCKS[language]
    syllables: list[str] = []
    for word in _INDIC_WORD_SPLIT.split(text):
        if word:
            syllables.extend(split_aksaras(word, base))
    return syllables


def transliterate_iast(text: str, language: Language | str = Language.ENGLISH) -> str:
    """IAST transliteration of Devanagari, Kannada or Telugu; English passes through."""
    language = Language(language)
    table = _IAST_TABLES.get(language)
    if table is None:
        return text

    base = _SCRIPT_BLOCKS[language]
    signs = _DEVANAGARI_SIGNS if base == 0x0900 else _DRAVIDIAN_SIGNS
    out: list[str] = []
    inherent_a = False

    for char in text:
        offset = _block_offset(char, base)
        if offset in signs:
            if inherent_a:
                out[-1] = out[-1][:-1] + signs[offset]
            else:
                out.append(signs[offset])
            inherent_a = False
        elif offset in _MARKS:
            out.append(_MARKS[offset])
            inherent_a = False
        else:
            out.append(table.get(char, char))
            inherent_a = char in table and offset in _CONSONANT_RANGE
    return "".join(out)
