"""Command-line interface for testing the scoring engine."""

import argparse
import json
import sys

from pydantic import ValidationError

from dropship_ai.scoring.models import (
    Goal,
    NicheInfo,
    ProductAnalytics,
    ScoringProduct,
    UserPreferences,
)
from dropship_ai.scoring.scorer import score_product

EXAMPLE_NICHE = NicheInfo(
    id="niche-kitchen",
    name="Kitchen Gadgets",
    synonyms=["kitchen", "cooking", "gadgets"],
)


def create_example_product() -> ScoringProduct:
    """Create an example product in the kitchen niche."""
    return ScoringProduct(
        id="example-001",
        title="Silicone Spatula Set - 5 Piece Heat Resistant",
        price=1499,
        cost_price=620,
        niche_id=EXAMPLE_NICHE.id,
        tags=["kitchen", "cooking", "utensils"],
        images=[
            "https://example.com/spatula-1.jpg",
            "https://example.com/spatula-2.jpg",
        ],
        description=(
            "A five piece silicone spatula set for everyday cooking. Each spatula "
            "is heat resistant, dishwasher safe and gentle on non-stick pans. "
            "Stainless steel cores keep the heads firm while the seamless design "
            "makes cleanup quick."
        ),
        supplier_link="https://supplier.example.com/spatula-set",
        analytics=ProductAnalytics(views=420, imports=35, conversions=6),
    )


def score_command(args: argparse.Namespace) -> int:
    """Score a product from JSON or use example."""
    if args.json:
        try:
            product = ScoringProduct.model_validate(json.loads(args.json))
        except (json.JSONDecodeError, ValidationError) as e:
            print(f"Invalid product JSON: {e}", file=sys.stderr)
            return 1
    else:
        product = create_example_product()
        print("Using example product (use --json to provide your own)\n")

    preferences = UserPreferences(
        niche_id=args.niche_id or EXAMPLE_NICHE.id,
        goal=Goal(args.goal) if args.goal else None,
    )
    niche = EXAMPLE_NICHE if preferences.niche_id == EXAMPLE_NICHE.id else None

    result = score_product(product, preferences, niche)

    # Output
    print(f"Product: {product.title or product.id}")
    print(f"{'=' * 50}")
    print(f"\nScore:      {result.score}/100")
    print(f"Confidence: {result.confidence:.0%}")

    print(f"\n  Breakdown:")
    for factor, value in result.breakdown.model_dump().items():
        print(f"    {factor:22}: {value:.2f}")

    print(f"\n{'=' * 50}")
    return 0


def main() -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="dropship-ai",
        description="Winning Product Scoring Engine",
    )
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Score command
    score_parser = subparsers.add_parser("score", help="Score a product")
    score_parser.add_argument(
        "--json",
        type=str,
        help="Product data as JSON string",
    )
    score_parser.add_argument(
        "--niche-id",
        type=str,
        help=f"Niche to score against (default: {EXAMPLE_NICHE.id})",
    )
    score_parser.add_argument(
        "--goal",
        choices=[g.value for g in Goal],
        help="Seller goal",
    )

    # Example command
    example_parser = subparsers.add_parser(
        "example",
        help="Show example product JSON",
    )
    example_parser.add_argument(
        "--pretty",
        action="store_true",
        help="Pretty print JSON",
    )

    args = parser.parse_args()

    if args.command == "score":
        return score_command(args)
    elif args.command == "example":
        data = create_example_product().model_dump(by_alias=True, exclude_none=True)
        if args.pretty:
            print(json.dumps(data, indent=2))
        else:
            print(json.dumps(data))
    else:
        parser.print_help()
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
