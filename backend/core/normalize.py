"""Exercise name normalization shared by catalog matching and migrations."""
import pathlib
import re
import unicodedata

import yaml

ROOT = pathlib.Path(__file__).resolve().parents[2]

DICT = yaml.safe_load((ROOT / "shared/dictionaries/normalization.yaml").read_text(encoding="utf-8"))

STOPWORDS = set(DICT["stopwords"])


def strip_accents(text: str) -> str:
    decomposed = unicodedata.normalize("NFD", text)
    return "".join(c for c in decomposed if not unicodedata.combining(c))


def normalize(text: str) -> str:
    t = strip_accents(str(text or "")).lower()
    t = re.sub(r"\s+", " ", t).strip()
    for k, v in DICT["expand"].items():
        t = re.sub(rf"\b{k}\b", v, t)
    t = re.sub(r"[-_/]", " ", t)
    t = re.sub(r"[^\w\s]", "", t)
    words = [w for w in t.split() if w not in STOPWORDS]
    for i, w in enumerate(words):
        if w in DICT["plural_to_singular"]:
            words[i] = DICT["plural_to_singular"][w]
    return " ".join(words).strip()
