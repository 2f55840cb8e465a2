"""
Entry point for the content generation CLI
"""

import asyncio
import json
import logging
import time

from content_brain import config
from content_brain.content_generator import ContentGenerator
from content_brain.exceptions import ContentBrainError

EXAMPLE_INPUT = {
    "businessContext": "B2B SaaS platform that automates accounts-payable workflows for mid-market finance teams",
    "targetAudience": "CFOs and finance operations leaders at companies with 200-2000 employees",
    "marketingGoals": "Generate qualified demo requests and position the product as the AP automation leader",
    "articlesCount": 1,
    "linkedinPostsCount": 2,
    "socialPostsCount": 3,
    "ctaType": "contact_us",
}


def ask(prompt: str, default: str = "") -> str:
    value = input(f"{prompt}{f' [{default}]' if default else ''}: ").strip()
    return value or default


def print_themes(state: dict):
    print("\n" + "=" * 80)
    print("THEMES")
    print("=" * 80)
    for theme in state.get("generated_themes", []):
        print(f"\n[{theme['id']}] {theme['title']}")
        print(f"  {theme['description']}")
        for reason in theme.get("why_it_works", []):
            print(f"  • {reason}")


def print_content(final_output: dict):
    print("\n" + "=" * 80)
    print("WORKFLOW COMPLETED - Final Content:")
    print("=" * 80)

    for article in (final_output.get("article") or {}).get("articles", []):
        print(f"\nARTICLE: {article['headline']}")
        print(f"  {article['subheadline']} ({article['word_count']} words)")

    for post in (final_output.get("linkedin_posts") or {}).get("posts", []):
        print(f"\nLINKEDIN: {post['hook']}")

    for post in (final_output.get("social_posts") or {}).get("posts", []):
        print(f"\n{post['platform'].upper()}: {post['content']}")

    metadata = final_output["generation_metadata"]
    print(f"\nAgents used: {', '.join(metadata['agents_used'])}")
    print(f"Quality scores: {json.dumps(metadata['content_quality_scores'])}")
    print(f"Processing time: {metadata['processing_time_ms']} ms")


async def run():
    generator = ContentGenerator()
    if config.SEED_DEFAULT_PROMPTS:
        await generator.seed_prompts()

    print("\n" + "=" * 80)
    print("Describe your campaign (or press Enter for the example campaign):")
    print("=" * 80)
    business_context = ask("Business context")

    if business_context:
        payload = {
            "businessContext": business_context,
            "targetAudience": ask("Target audience"),
            "marketingGoals": ask("Marketing goals"),
            "articlesCount": int(ask("Articles", "1")),
            "linkedinPostsCount": int(ask("LinkedIn posts", "4")),
            "socialPostsCount": int(ask("Social posts", "8")),
            "ctaType": ask("CTA type (contact_us/download_whitepaper)", "contact_us"),
            "ctaUrl": ask("CTA URL") or None,
            "selectedWhitepaperId": ask("Whitepaper ID") or None,
        }
    else:
        payload = EXAMPLE_INPUT
        print(f"\nUsing example campaign: {payload['businessContext']}")

    state = await generator.start(payload)
    print(f"\nExecutive summary: {state['marketing_brief']['executive_summary']}")

    # Theme selection loop
    while True:
        print_themes(state)
        choice = ask("\nSelect a theme ID, or 'r' to regenerate")
        if choice.lower() == "r":
            state = await generator.regenerate_themes(state)
            continue
        break

    started_at = time.time()
    state = await generator.continue_with_selected_theme(state, choice)
    final_output = generator.final_output(state, started_at)
    print_content(final_output)

    if ask("\nSave campaign? (y/n)", "n").lower() == "y":
        campaign_id, _ = await generator.save_campaign(
            ask("Campaign name", "Untitled campaign"),
            final_output,
            whitepaper_id=state.get("selected_whitepaper_id"),
        )
        print(f"✓ Saved campaign {campaign_id}")


def main():
    """Main CLI entry point"""
    logging.basicConfig(level=config.LOG_LEVEL, format="%(message)s")

    print("=" * 80)
    print("Content Brain - Interactive Workflow")
    print("=" * 80)

    try:
        asyncio.run(run())
    except ContentBrainError as e:
        print(f"\n✗ {type(e).__name__}: {e.message}")
        if e.state:
            print(f"  Workflow stopped at: {e.state.get('current_step')}")
        raise SystemExit(1)


if __name__ == "__main__":
    main()
