"""Arabic name normalization and fuzzy matching.

Farmer and supplier names are typed by hand at the weigh station, so the
same person shows up as ابراهيم / أبراهيم / إبراهيم, بصارة / بصاره / بصره,
الغامري / الغمري and so on.  ``normalize_arabic`` folds those variants into
one comparison key; ``matches_arabic`` does word-level containment on keys.

The key is lossy and many-to-one.  It is only ever used for comparison,
never for display.

Pipeline (order matters, each step works on the previous output):
  1. lowercase (embedded Latin only)
  2. أ إ آ ا → ا
  3. ة → ه
  4. ى ي → ي
  5. ALEF_CONTRACTIONS, in table order: "ا" + X → X
  6. doubled consonant → single
  7. strip harakat / tanwin / shadda / sukun
  8. collapse whitespace, trim

One pass of 1-8 can leave work for a second pass (runs of Alif, or a
haraka sitting between Alif and the next letter), so the pipeline is
repeated until the key stops changing.  That makes the key idempotent:
normalize_arabic(normalize_arabic(x)) == normalize_arabic(x).
"""

import re

_ALEF = "ا"

# أ إ آ ا → ا
_ALEF_VARIANTS = re.compile("[أإآا]")

# ة → ه
_TA_MARBUTA = "ة"
_HA = "ه"

# ى ي → ي
_YA_VARIANTS = re.compile("[يى]")
_YA = "ي"

# "Alif + letter" → letter.  Kept exactly as the intake app shipped it,
# including the repeated ج row; the table is replayed in this order.
ALEF_CONTRACTIONS: tuple[tuple[str, str], ...] = (
    ("ام", "م"),  # الغامري = الغمري
    ("اه", "ه"),  # بصاره = بصره
    ("او", "و"),  # فاروق = فروق
    ("اي", "ي"),  # خايل = خيل
    ("ال", "ل"),  # سالم = سلم
    ("اب", "ب"),  # عابد = عبد
    ("اد", "د"),  # عادل = عدل
    ("اس", "س"),  # عباس = عبس
    ("ات", "ت"),  # فاتح = فتح
    ("اك", "ك"),  # باكر = بكر
    ("ان", "ن"),  # عانس = عنس
    ("اج", "ج"),  # فاجر = فجر
    ("اع", "ع"),  # قاعد = قعد
    ("اف", "ف"),  # عافية = عفيه
    ("اق", "ق"),  # فاقد = فقد
    ("اط", "ط"),  # فاطم = فطم
    ("اض", "ض"),  # عاضد = عضد
    ("اص", "ص"),  # عاصم = عصم
    ("اخ", "خ"),  # عاخر = عخر
    ("اذ", "ذ"),  # عاذر = عذر
    ("اش", "ش"),  # عاشق = عشق
    ("اث", "ث"),  # عاثر = عثر
    ("اظ", "ظ"),  # عاظم = عظم
    ("اغ", "غ"),  # باغي = بغي
    ("اح", "ح"),  # صاحب = صحب
    ("اج", "ج"),  # خاجة = خجه  (duplicate of the row above)
    ("از", "ز"),  # عازب = عزب
    ("ار", "ر"),  # عارف = عرف
)

# Letters whose immediate doubling collapses to one
_DOUBLED_LETTERS = re.compile(r"([بتثجحخدذرزسشصضطظعغفقكلمنهوي])\1")

# Fathatan … Sukun (U+064B–U+0652)
_DIACRITICS = re.compile("[\u064b-\u0652]")

_WHITESPACE = re.compile(r"\s+")


def _normalize_once(text: str) -> str:
    text = text.lower()
    text = _ALEF_VARIANTS.sub(_ALEF, text)
    text = text.replace(_TA_MARBUTA, _HA)
    text = _YA_VARIANTS.sub(_YA, text)
    for pattern, replacement in ALEF_CONTRACTIONS:
        text = text.replace(pattern, replacement)
    text = _DOUBLED_LETTERS.sub(r"\1", text)
    text = _DIACRITICS.sub("", text)
    return _WHITESPACE.sub(" ", text).strip()


def normalize_arabic(text: str | None) -> str:
    """Return the comparison key for ``text``.

    Total: ``None`` / empty input gives ``""``.
    """
    if not text:
        return ""
    key = _normalize_once(str(text))
    while True:
        again = _normalize_once(key)
        if again == key:
            return key
        key = again


def query_words(query: str | None) -> list[str]:
    """Normalized, non-empty words of a search query."""
    return [w for w in normalize_arabic(query).split(" ") if w]


def matches_arabic(query: str | None, target: str | None) -> bool:
    """True when every word of ``query`` occurs inside ``target``.

    Both sides are normalized first.  Containment is plain substring, so a
    query word may match in the middle of a longer target word.  Word
    order does not matter.
    """
    words = query_words(query)
    normalized_target = normalize_arabic(target)
    if not words or not normalized_target:
        return False
    return all(word in normalized_target for word in words)
