"""Script to run the ingredient backfill against a running API and report before/after stats"""
import requests
import sys

API_BASE_URL = "http://localhost:8000/api"


def get_stats():
    """Fetch ingredient processing counters"""
    response = requests.get(f"{API_BASE_URL}/ingredients/stats", timeout=30)
    response.raise_for_status()
    return response.json()


def print_stats(title: str, stats: dict):
    print(f"\n{title}")
    print(f"  Variants:                    {stats['totalVariants']}")
    print(f"  With ingredient text:        {stats['variantsWithIngredientText']}")
    print(f"  With ingredient links:       {stats['variantsWithIngredientAnalysis']}")
    print(f"  Ingredients in dictionary:   {stats['totalIngredients']}")
    print(f"  Variant-ingredient links:    {stats['totalIngredientRelationships']}")


def main():
    print("=" * 60)
    print("PET FOOD CATALOG - INGREDIENT BACKFILL")
    print("=" * 60)

    print_stats("Before:", get_stats())

    # The backfill runs inline; large catalogs can take a while
    response = requests.post(f"{API_BASE_URL}/ingredients/backfill", timeout=3600)
    if response.status_code != 200:
        print(f"✗ Error: {response.status_code}")
        print(response.text)
        return 1

    result = response.json()
    print(f"\n✓ Processed {result['processed']} variants")
    print(f"  Ingredients created: {result['ingredientsCreated']}")
    print(f"  Ingredients linked:  {result['ingredientsLinked']}")

    if result["errors"]:
        print(f"\n✗ {len(result['errors'])} error(s):")
        for error in result["errors"]:
            print(f"  - {error}")

    print_stats("After:", get_stats())
    print("=" * 60)
    return 0 if not result["errors"] else 1


if __name__ == "__main__":
    sys.exit(main())
