#!/usr/bin/env python3
"""
Interactive demo for the vehicle search pipeline.

Usage:
    python scripts/demo.py                   # Uses OPENAI_API_KEY when set
    python scripts/demo.py --verbose         # Also print extracted parameters and tier attempts
"""
import argparse
import json
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from carsearch import SearchResponse, create_pipeline


def format_vehicle(v, idx: int) -> str:
    """Format a vehicle for display."""
    price = v.price or "Price N/A"
    color = v.exterior or "?"
    return f"  {idx}. {v.title()} - {price} ({color}, {v.location or 'location N/A'})"


def display_response(response: SearchResponse, verbose: bool) -> None:
    """Display a search response in a formatted way."""
    print("\n" + "=" * 60)
    print(f"{response.response}\n")

    for i, vehicle in enumerate(response.vehicles, 1):
        print(format_vehicle(vehicle, i))

    if response.suggestions:
        print("\nAlternatives:")
        for alt in response.suggestions.alternative_searches:
            print(f"  - {alt.description}")
        for question in response.suggestions.follow_up_questions:
            print(f"  ? {question}")

    if verbose:
        print("-" * 40)
        print(f"Language: {response.language}  Tier: {response.tier}  "
              f"Extraction: {response.extraction_source}  Time: {response.processing_time_ms}ms")
        print(f"Parameters: {json.dumps(response.extracted_params, ensure_ascii=False)}")
        for attempt in response.search_attempts:
            print(f"  {attempt}")

    print("=" * 60)


def main():
    parser = argparse.ArgumentParser(description='Interactive Vehicle Search Demo')
    parser.add_argument('--verbose', action='store_true',
                        help='Show extracted parameters and tier attempts')
    args = parser.parse_args()

    print("=" * 60)
    print("VEHICLE SEARCH - Interactive Demo")
    print("=" * 60)
    print("Ask in English or Spanish. Type 'quit' to exit, 'clear' to drop caches")
    print("=" * 60)

    pipeline = create_pipeline()

    while True:
        try:
            user_input = input("\nYou: ").strip()

            if not user_input:
                continue

            if user_input.lower() == 'quit':
                print("Goodbye!")
                break

            if user_input.lower() == 'clear':
                cleared = pipeline.clear_caches()
                print(f"Caches cleared: {cleared}")
                continue

            display_response(pipeline.search(user_input), args.verbose)

        except KeyboardInterrupt:
            print("\n\nGoodbye!")
            break
        except Exception as e:
            print(f"\nError: {e}")
            import traceback
            traceback.print_exc()


if __name__ == '__main__':
    main()
