"""Generate flashcard candidates from a sample text with the real gateway.

Usage (from repo root):
    python backend/scripts/smoke_generation.py [--model openai/gpt-4o-mini] [--guidance "..."]

Usage (from backend/):
    python scripts/smoke_generation.py

Requires OPENROUTER_API_KEY in the environment or backend/.env.
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

BACKEND_DIR = Path(__file__).resolve().parents[1]
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))

from flashdeck.generation.catalog import DEFAULT_MODEL
from flashdeck.services.generation import get_default_generator

_SAMPLE_TEXT = (
    "Photosynthesis is the process by which green plants, algae, and some bacteria convert light energy "
    "into chemical energy stored in glucose. It takes place mainly in the chloroplasts of leaf cells, "
    "where the pigment chlorophyll absorbs red and blue light and reflects green light. The overall "
    "reaction combines six molecules of carbon dioxide and six molecules of water to produce one molecule "
    "of glucose and six molecules of oxygen. Photosynthesis has two stages. The light-dependent reactions "
    "occur in the thylakoid membranes; they split water, release oxygen, and produce ATP and NADPH. The "
    "light-independent reactions, known as the Calvin cycle, occur in the stroma; they use ATP and NADPH "
    "to fix carbon dioxide into three-carbon sugars that the plant assembles into glucose. The enzyme "
    "RuBisCO catalyses the first step of carbon fixation and is often described as the most abundant "
    "protein on Earth. Factors that limit the rate of photosynthesis include light intensity, carbon "
    "dioxide concentration, and temperature. Plants adapted to hot, dry climates use C4 or CAM pathways "
    "to reduce water loss and photorespiration. The oxygen released by photosynthesis sustains aerobic "
    "life, and the glucose produced forms the base of most food chains on the planet."
)


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--model", default=DEFAULT_MODEL)
    parser.add_argument("--guidance", default=None)
    args = parser.parse_args()

    generator = get_default_generator()
    output = generator.generate(_SAMPLE_TEXT, args.model, args.guidance)
    print(
        json.dumps(
            {
                "model": output.model,
                "dropped": output.dropped_count,
                "usage": {
                    "prompt_tokens": output.usage.prompt_tokens,
                    "completion_tokens": output.usage.completion_tokens,
                    "total_tokens": output.usage.total_tokens,
                },
                "candidates": [
                    {"front": candidate.front, "back": candidate.back, "prompt": candidate.prompt}
                    for candidate in output.candidates
                ],
            },
            indent=2,
        )
    )


if __name__ == "__main__":
    main()
