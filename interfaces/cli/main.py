from __future__ import annotations

import argparse
import asyncio
import logging

from config import LOG_LEVEL
from companion.models import PetProfile
from interfaces.processor_factory import build_processor


async def run_cli(pet_name: str, memorial: bool, use_llm: bool | None = None) -> None:
    processor = build_processor(use_llm=use_llm)
    pet = PetProfile(id="cli-pet", name=pet_name, status="memorial" if memorial else "active")
    user_id = "me"
    print(f"Petalk CLI ({pet.mode}). 메시지를 입력하세요, 'exit' 로 종료.")

    while True:
        text = input("> ").strip()
        if text.lower() in {"exit", "quit", "q"}:
            print("안녕!")
            break
        if not text:
            continue

        turn = await processor.prepare_turn(user_id, pet, text)
        analysis = turn.analysis
        stage = f" grief={analysis.grief_stage}" if analysis.grief_stage else ""
        flag = " (degraded)" if analysis.degraded else ""
        print(f"[emotion={analysis.emotion} score={analysis.score:.2f} source={analysis.source}{stage}]{flag}")
        if turn.usage is not None and turn.usage.is_warning:
            print(f"[남은 대화 {turn.usage.remaining}회]")
        print(turn.guide)
        if turn.memory_context:
            print("\n## 기억하고 있는 정보")
            print(turn.memory_context)
        for memory in turn.proposed_memories:
            print(f"+ 기억 추가: [{memory.memory_type}] {memory.title}")


def main() -> None:
    parser = argparse.ArgumentParser(description="Interactive companion turn preview")
    parser.add_argument("--pet", default="초코", help="pet name")
    parser.add_argument("--memorial", action="store_true", help="memorial mode")
    parser.add_argument("--offline", action="store_true", help="keyword-only, no capability calls")
    args = parser.parse_args()

    logging.basicConfig(level=LOG_LEVEL)
    asyncio.run(run_cli(args.pet, args.memorial, use_llm=False if args.offline else None))


if __name__ == "__main__":
    main()
