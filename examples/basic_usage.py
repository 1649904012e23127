"""Basic usage example for biblint."""
from pathlib import Path

from biblint import BibLinter, Config, parse
from biblint.context import context_at, describe_at
from biblint.core.strings import entry_values

SAMPLE = Path(__file__).parent / "sample.bib"


def main():
    text = SAMPLE.read_text(encoding="utf-8")

    # Example 1: Parse and walk the document
    print("=== Example 1: Document structure ===")
    document = parse(text)
    for block in document.blocks:
        line, column = document.location(block.span.start)
        print(f"{line:>3}:{column:<3} {block.kind.value}")

    for entry in document.entries:
        print(f"@{entry.entry_type}{{{entry.key}}}: {', '.join(entry.field_names)}")

    # Example 2: Resolve @string macros
    print("\n=== Example 2: Resolved values ===")
    for key, fields in entry_values(document).items():
        print(f"{key}: {fields}")

    # Example 3: Lint
    print("\n=== Example 3: Diagnostics ===")
    result = BibLinter().lint(text)
    print(result)

    # Same document, unknown fields ignored
    relaxed = BibLinter(config=Config().disable("unknown-fields"))
    print(f"\nWithout unknown-field warnings: {relaxed.lint(text).warning_count} warnings")

    # Example 4: Editor support queries
    print("\n=== Example 4: Cursor context ===")
    pos = text.index("journal") + 3
    context = context_at(document, pos)
    print(f"At offset {pos}: {context.kind.value} (prefix {context.prefix!r})")
    info = describe_at(document, pos)
    if info:
        print(f"  {info.name}: {info.description}")


if __name__ == "__main__":
    main()
