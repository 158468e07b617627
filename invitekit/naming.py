from __future__ import annotations

import re

_WORD_START = re.compile(r"\b\w", re.ASCII)


def _title_words(text: str) -> str:
    return _WORD_START.sub(lambda m: m.group(0).upper(), text)


def folder_to_category(folder: str) -> str:
    """"bar-mitzvah" -> "Bar Mitzvah" """
    return _title_words(folder.replace("-", " "))


def stem_to_name(stem: str) -> str:
    """"classic-cream" -> "Classic Cream" """
    return _title_words(re.sub(r"[-_]", " ", stem))


def id_to_label(field_id: str) -> str:
    """"name_signature" -> "Name Signature" """
    return _title_words(re.sub(r"[-_]", " ", field_id))


def template_id(folder: str, stem: str) -> str:
    return f"{folder}-{stem}"


def public_url(prefix: str, folder: str, filename: str) -> str:
    return f"{prefix.rstrip('/')}/{folder}/{filename}"
