"""CLI entry point for Inkstream."""

import argparse
import asyncio
import sys
from typing import Optional

from .models.generation import GenerationOptions
from .providers.registry import list_providers
from .session.session import start_session


async def generate_text(provider: str, prompt: str, model: Optional[str] = None,
                        max_tokens: Optional[int] = None, temperature: Optional[float] = None,
                        show_thinking: bool = False) -> int:
    """Stream a generation to stdout. Returns the process exit code."""
    printed = {"answer": ""}
    exit_code = {"value": 0}

    def on_stream(answer_text, snapshot):
        shown = printed["answer"]
        if answer_text.startswith(shown):
            print(answer_text[len(shown):], end='', flush=True)
            printed["answer"] = answer_text

    def on_complete(answer_text, snapshot):
        shown = printed["answer"]
        if answer_text.startswith(shown):
            print(answer_text[len(shown):])
        else:
            # Reasoning tags were moved out of the answer: reprint it clean
            print("\n" + "-" * 50)
            print(answer_text)
        if show_thinking and snapshot.thinking_trace:
            print("\n" + "-" * 50)
            print(snapshot.thinking_trace.summary)
            print(snapshot.thinking_trace.full_text)

    def on_error(error, snapshot):
        exit_code["value"] = 1
        print(f"\nError: {error.message}", file=sys.stderr)

    try:
        options = GenerationOptions(
            prompt=prompt,
            provider_id=provider,
            model=model,
            max_tokens=max_tokens,
            temperature=temperature,
            on_stream=on_stream,
            on_complete=on_complete,
            on_error=on_error,
        )
        handle = start_session(options)
    except ValueError as e:
        print(f"Error: {str(e)}", file=sys.stderr)
        return 2

    await handle.wait()
    return exit_code["value"]


def print_providers() -> None:
    """List the built-in providers."""
    print("Available Providers:")
    print("-" * 50)
    for provider in list_providers():
        thinking = " (thinking)" if provider["supports_thinking"] else ""
        print(f"{provider['id']}: {provider['display_name']}{thinking}")
        print(f"   default model: {provider['default_model']}")
        if provider["supported_models"]:
            print(f"   models: {', '.join(provider['supported_models'])}")
        print()


def main(argv=None) -> int:
    """Main CLI function."""
    parser = argparse.ArgumentParser(description="Inkstream CLI")
    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    generate_parser = subparsers.add_parser('generate', help='Stream a generation from a provider')
    generate_parser.add_argument('provider', help='Provider id (e.g., "openai", "deepseek", "ollama")')
    generate_parser.add_argument('prompt', help='Text prompt')
    generate_parser.add_argument('--model', help='Model name (provider default when omitted)')
    generate_parser.add_argument('--max-tokens', type=int, help='Maximum tokens to generate')
    generate_parser.add_argument('--temperature', type=float, help='Temperature (0.0-2.0)')
    generate_parser.add_argument('--show-thinking', action='store_true', help='Print the reasoning trace')

    subparsers.add_parser('list-providers', help='List available providers')

    args = parser.parse_args(argv)

    if args.command == 'generate':
        return asyncio.run(generate_text(
            args.provider,
            args.prompt,
            args.model,
            args.max_tokens,
            args.temperature,
            args.show_thinking,
        ))
    elif args.command == 'list-providers':
        print_providers()
        return 0
    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
