#!/usr/bin/env python3
"""CLI to run one screening conversation in the terminal."""

from __future__ import annotations

import argparse
import asyncio
import dataclasses
import json
import sys

from dotenv import load_dotenv

from screening_agent.config import ScreeningConfig
from screening_agent.console import ConsoleSynthesizer, ScriptedRecognizer, StdinRecognizer
from screening_agent.controller import ScreeningVoiceAgent
from screening_agent.speech import SpeechIO


async def run_conversation(agent: ScreeningVoiceAgent) -> None:
    await agent.start()
    await agent.wait_closed()


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Run a candidate screening conversation")
    parser.add_argument("--job-title", help="Role being screened for")
    parser.add_argument("--company", help="Company name used in the greeting")
    parser.add_argument(
        "--answer",
        action="append",
        default=[],
        help="Scripted candidate answer (repeat in order); reads stdin when omitted",
    )

    args = parser.parse_args(argv)
    load_dotenv()
    cfg = ScreeningConfig.from_env()

    if args.answer:
        recognizer = ScriptedRecognizer(args.answer)
        # Nothing is played aloud, so there is no echo to wait out.
        cfg = dataclasses.replace(cfg, listen_delay_seconds=0.0, retry_delay_seconds=0.0)
    else:
        recognizer = StdinRecognizer()

    agent = ScreeningVoiceAgent(
        job_title=args.job_title,
        company=args.company,
        speech=SpeechIO(recognizer=recognizer, synthesizer=ConsoleSynthesizer()),
        config=cfg,
    )
    asyncio.run(run_conversation(agent))

    print(json.dumps(agent.engine.state.collected_data, indent=2))
    if agent.failed:
        print("Screening stopped: speech was not recognized.", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
