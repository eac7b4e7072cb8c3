"""Keyword dictionaries for the fast classifiers.

Each table is an ordered list of ``(label, keywords)`` pairs, not a mapping:
the order *is* the tie-break priority of the fast classifiers (the earlier
label wins when match counts are equal). Keywords are matched as substrings
against the message after lower-casing and removing all whitespace, so a
keyword must itself contain no whitespace.

Counting is per keyword, not per occurrence: ``"보고싶"`` present twice
still counts once. Keep keywords inside one list from being substrings of
each other unless a double count is intended.
"""

from __future__ import annotations

from companion.models import Emotion, GriefStage

# ``neutral`` is never scored; it is the default when nothing matches.
EMOTION_KEYWORDS: list[tuple[Emotion, tuple[str, ...]]] = [
    ("happy", (
        "행복", "기뻐", "기쁘", "기쁨", "즐거", "좋아", "웃었", "웃겨",
        "happy", "glad",
    )),
    ("sad", (
        "슬퍼", "슬프", "슬픔", "우울", "눈물", "울었", "울고", "힘들",
        "보고싶", "그리워",
        "sad",
    )),
    ("anxious", (
        "걱정", "불안", "무서", "두려", "초조", "긴장", "겁나",
        "anxious", "worried",
    )),
    ("angry", (
        "화나", "화가", "화났", "짜증", "분노", "열받", "억울", "원망",
        "angry",
    )),
    ("grateful", (
        "고마", "고맙", "감사", "덕분",
        "thank",
    )),
    ("lonely", (
        "외로", "외롭", "혼자", "쓸쓸", "허전", "보고싶", "그리워", "그립",
        "lonely", "missyou",
    )),
    ("peaceful", (
        "편안", "평온", "평화", "차분", "안정", "여유",
        "peaceful", "calm",
    )),
    ("excited", (
        "신나", "신난", "설레", "기대", "두근",
        "excited",
    )),
]

# ``unknown`` is never scored; it is the default when nothing matches.
GRIEF_KEYWORDS: list[tuple[GriefStage, tuple[str, ...]]] = [
    ("denial", (
        "믿기지", "안믿겨", "믿을수없", "실감이안", "실감안나", "꿈같",
        "꿈이었으면", "거짓말같", "아직도있을",
    )),
    ("anger", (
        "왜하필", "원망", "억울", "화가나", "용서못", "분해", "불공평",
    )),
    ("bargaining", (
        "더라면", "더잘해줄", "그때내가", "후회", "돌아갈수", "내탓", "미안해",
    )),
    ("depression", (
        "무기력", "공허", "허전", "매일울", "아무것도", "텅빈", "눈물만",
    )),
    ("acceptance", (
        "고마웠", "행복했어", "잘지내", "편히쉬", "좋은곳에서", "추억할", "다시만나",
    )),
]
