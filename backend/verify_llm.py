import asyncio
import os
import sys
from dotenv import load_dotenv

# Add backend to path
sys.path.append(os.path.dirname(__file__))

# Load env from backend/.env
load_dotenv(os.path.join(os.path.dirname(__file__), ".env"))

from kltransit.config import Settings
from kltransit.exceptions import FareModelError
from kltransit.llm_client import create_collaborator
from kltransit.llm_output import parse_json_object


async def verify():
    settings = Settings.from_env()
    collaborator = create_collaborator(settings)
    print(f"Testing {collaborator.name} ({collaborator.model_name})...")

    try:
        text = await collaborator.complete('Return ONLY this JSON: {"ok": true}')
        print(f"\nResponse received:\n{text}")
        parsed = parse_json_object(text)
        print(f"Parsed: {parsed}")
        print("\nSUCCESS: LLM collaborator is working!")
    except FareModelError as e:
        print(f"\nERROR: {e}")

if __name__ == "__main__":
    asyncio.run(verify())
