from __future__ import annotations


EMOTION_DEFINITIONS = """
감정 설명:
- happy: 기쁨, 행복, 즐거움
- sad: 슬픔, 우울, 상실감
- anxious: 불안, 걱정, 두려움
- angry: 화남, 짜증, 분노
- grateful: 감사, 고마움
- lonely: 외로움, 그리움 (특히 반려동물 관련)
- peaceful: 평화, 안정, 편안함
- excited: 신남, 흥분, 기대
- neutral: 중립적, 일상적 대화
""".strip()

GRIEF_STAGE_DEFINITIONS = """
애도 단계 설명 (반려동물을 떠나보낸 가족의 상태):
- denial: 부정. 떠난 것이 실감 나지 않음 ("아직도 안 믿겨", "꿈 같아", "문 열면 있을 것 같아")
- anger: 분노. 상실에 대한 화, 원망 ("왜 하필", "병원이 원망스러워", "너무 억울해")
- bargaining: 타협. 후회와 가정 ("그때 ~했더라면", "내가 더 잘했으면", "다시 돌아간다면")
- depression: 슬픔. 깊은 상실감과 무기력 ("아무것도 못 하겠어", "너무 허전해", "매일 울어")
- acceptance: 수용. 추억을 따뜻하게 떠올림 ("고마웠어", "행복했던 기억", "잘 지내길")
- unknown: 위 어디에도 해당하지 않음
""".strip()

COMPOUND_STATE_RULE = """
반려동물 상실 표현 규칙:
- "보고싶어", "miss you", "그리워" 같은 표현은 단일 감정이 아닌 복합 상태입니다.
  대부분 lonely + sad 이며, 감사와 함께 쓰였다면 grateful + acceptance 입니다.
- 복합 상태일 때 emotion 에는 가장 두드러진 하나를, context 에 나머지를 적으세요.
""".strip()


def build_emotion_refiner_prompt(memorial_mode: bool) -> str:
    """Instruction for the text-classification capability."""
    fields = [
        '    "emotion": "happy|sad|anxious|angry|grateful|lonely|peaceful|excited|neutral"',
        '    "score": 0.0-1.0',
        '    "context": "감정 판단 근거 (한 문장)"',
    ]
    if memorial_mode:
        fields.append('    "griefStage": "denial|anger|bargaining|depression|acceptance|unknown"')
    schema = "{\n" + ",\n".join(fields) + "\n}"

    sections = [
        "당신은 감정 분석 전문가입니다. 사용자의 메시지를 분석하여 감정을 파악합니다.",
        "반드시 다음 JSON 형식으로만 응답하세요. 다른 텍스트나 ```json 블록은 금지입니다:",
        schema,
        EMOTION_DEFINITIONS,
    ]
    if memorial_mode:
        sections.append(GRIEF_STAGE_DEFINITIONS)
    sections.append(COMPOUND_STATE_RULE)
    return "\n\n".join(sections)


MEMORY_TYPE_DEFINITIONS = """
메모리 타입:
- preference: 좋아하는 것/싫어하는 것 (예: 간식, 장난감)
- episode: 특별한 추억/에피소드
- health: 건강 관련 정보
- personality: 성격/습관
- relationship: 가족/친구 관계
- place: 좋아하는 장소
- routine: 일상 루틴 (시간 정보 없이 반복되는 습관)
- schedule: 시간이 정해진 일정 (산책 시간, 밥 시간 등)
""".strip()

TIME_NORMALIZATION_TABLE = """
**중요: 시간 패턴 추출**
"아침에 산책해", "저녁 7시에 밥 줘", "매일 9시에 약 먹어" 같은 표현에서 시간 정보를 추출하세요.
- "아침" → "08:00"
- "점심" → "12:00"
- "저녁" → "18:00"
- "밤" → "21:00"
- 구체적 시간이 함께 있으면 막연한 표현보다 구체적 시간을 우선합니다.
- 구체적 시간은 문맥으로 오전/오후를 판단해 그대로 사용 (예: "저녁 7시" → "19:00", "아침 7시" → "07:00")
- time 은 항상 "HH:MM" 24시간 형식
- 요일이 있으면 type "weekly" 와 dayOfWeek (0=일요일 ~ 6=토요일), 날짜가 있으면 type "monthly" 와 dayOfMonth
""".strip()

MEMORY_EXAMPLES = """
예시:
입력: "매일 아침 8시에 산책 가요"
출력: [{"memoryType": "schedule", "title": "아침 산책", "content": "매일 아침 8시에 산책", "importance": 8, "timeInfo": {"type": "daily", "time": "08:00"}}]

입력: "닭가슴살 간식을 제일 좋아해요"
출력: [{"memoryType": "preference", "title": "닭가슴살 좋아함", "content": "닭가슴살 간식을 가장 좋아함", "importance": 7, "timeInfo": null}]

입력: "오늘 날씨 좋다"
출력: []
""".strip()


def build_memory_extractor_prompt(pet_name: str) -> str:
    """Instruction for the structured-extraction capability."""
    name = pet_name or "반려동물"
    return "\n\n".join(
        [
            f"당신은 대화에서 반려동물({name})에 대한 중요한 정보를 추출하는 전문가입니다.",
            f"사용자의 메시지에서 {name}에 대해 오래 기억해야 할 정보가 있다면 추출하세요.\n"
            "기억할 만한 정보가 없으면 빈 배열 [] 을 반환하세요. 빈 배열은 정상적인 응답입니다.",
            "반드시 다음 JSON 배열 형식으로만 응답하세요:\n"
            "[\n"
            "    {\n"
            '        "memoryType": "preference|episode|health|personality|relationship|place|routine|schedule",\n'
            '        "title": "간단한 제목 (10자 이내)",\n'
            '        "content": "상세 내용",\n'
            '        "importance": 1-10,\n'
            '        "timeInfo": null 또는 { "type": "daily|weekly|monthly|once", "time": "HH:MM", '
            '"dayOfWeek": 0-6, "dayOfMonth": 1-31 }\n'
            "    }\n"
            "]",
            MEMORY_TYPE_DEFINITIONS,
            TIME_NORMALIZATION_TABLE,
            MEMORY_EXAMPLES,
        ]
    )
