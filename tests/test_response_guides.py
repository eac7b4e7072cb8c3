import pytest

from companion.guides.response_guides import (
    DAILY_GUIDES,
    GRIEF_GUIDE_HEADING,
    GRIEF_GUIDES,
    MEMORIAL_GUIDES,
    compose_guide,
    guide_for_emotion,
    guide_for_grief_stage,
)
from companion.models import EMOTIONS, GRIEF_STAGES

CHEER_UP_PHRASES = ("힘내", "기운 내", "기운내", "이겨내", "털어내")
REPLACEMENT_PET_PHRASES = ("새로운 반려동물", "새 반려동물", "입양", "새 강아지", "새 고양이")
STOP_FEELING_PHRASES = ("울지마", "울지 마", "슬퍼하지마", "슬퍼하지 마")


def test_tables_cover_every_key():
    for emotion in EMOTIONS:
        assert DAILY_GUIDES[emotion].strip()
        assert MEMORIAL_GUIDES[emotion].strip()
    for stage in GRIEF_STAGES:
        assert GRIEF_GUIDES[stage].strip()


def test_depression_guide_never_cheers_up_or_suggests_new_pet():
    guide = guide_for_grief_stage("depression")
    for phrase in CHEER_UP_PHRASES + REPLACEMENT_PET_PHRASES:
        assert phrase not in guide


@pytest.mark.parametrize("guide", list(MEMORIAL_GUIDES.values()) + list(GRIEF_GUIDES.values()))
def test_memorial_guides_never_tell_family_to_stop_feeling(guide):
    for phrase in STOP_FEELING_PHRASES:
        assert phrase not in guide


def test_memorial_sad_guide_validates_and_reassures():
    guide = guide_for_emotion("sad", "memorial")
    assert "인정" in guide
    assert "곁에" in guide
    assert guide != guide_for_emotion("sad", "daily")


def test_daily_mode_ignores_grief_stage():
    assert compose_guide("sad", "daily", "denial") == DAILY_GUIDES["sad"]


def test_memorial_mode_appends_grief_guide():
    guide = compose_guide("sad", "memorial", "denial")
    assert guide.startswith(MEMORIAL_GUIDES["sad"])
    assert GRIEF_GUIDE_HEADING in guide
    assert guide.endswith(GRIEF_GUIDES["denial"])


@pytest.mark.parametrize("stage", [None, "unknown"])
def test_memorial_mode_without_stage_uses_emotion_guide_only(stage):
    assert compose_guide("lonely", "memorial", stage) == MEMORIAL_GUIDES["lonely"]
