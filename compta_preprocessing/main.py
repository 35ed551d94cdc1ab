import argparse
import json
import sys
from pathlib import Path

from compta_preprocessing.config.settings import Settings
from compta_preprocessing.logging.logger import Log
from compta_preprocessing.preprocessing.orchestrator import build_orchestrator
from compta_preprocessing.registry.models import PathReference, RegistryEntry


def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="compta-preprocess",
        description=(
            "Consolidate raw accounting PDF bundles of one business into one "
            "COMPTA<year>.pdf per fiscal year."
        ),
    )
    p.add_argument("business_id", help="SIRET or SIREN of the business.")
    p.add_argument(
        "sources",
        nargs="+",
        type=Path,
        help="Registry documents: PDF files, or directories whose files are all added.",
    )
    p.add_argument("--documents-root", type=Path, default=None, help="Storage root directory.")
    p.add_argument(
        "--provider",
        default=None,
        help="Classifier provider (example, keyword, openai, openai_compatible, ...).",
    )
    p.add_argument("--mode", choices=["document", "page"], default=None, help="Classifier mode.")
    p.add_argument("--marker", default=None, help="Raw-group filename marker.")
    p.add_argument("--log-level", default=None, help="Log level (DEBUG, INFO, ...).")
    p.add_argument(
        "--output",
        type=Path,
        default=None,
        help=(
            "Write the JSON manifest to this file. Without it the manifest goes "
            "to stdout and logs go to stderr."
        ),
    )
    return p


def build_registry(sources: list[Path]) -> list[RegistryEntry]:
    """One path-referenced entry per file; directory contents are added sorted by name."""
    entries: list[RegistryEntry] = []
    for source in sources:
        if source.is_dir():
            files = sorted((p for p in source.iterdir() if p.is_file()), key=lambda p: p.name)
        else:
            files = [source]
        entries.extend(
            RegistryEntry(filename=path.name, payload=PathReference(path=path)) for path in files
        )
    return entries


def load_settings(args: argparse.Namespace) -> Settings:
    overrides = {
        "documents_root": args.documents_root,
        "classifier_provider": args.provider,
        "classifier_mode": args.mode,
        "raw_group_marker": args.marker,
        "log_level": args.log_level,
    }
    return Settings(**{key: value for key, value in overrides.items() if value is not None})


def main(argv: list[str] | None = None) -> int:
    """Entry point: settings -> orchestrator -> one tenant run -> JSON manifest."""
    args = build_arg_parser().parse_args(argv)
    log_stream = sys.stdout if args.output is not None else sys.stderr
    try:
        settings = load_settings(args)
        Log.configure(settings.log_level, stream=log_stream)
        orchestrator = build_orchestrator(settings)
    except ValueError as exc:
        Log.configure("ERROR", stream=log_stream)
        Log.error(f"Invalid configuration: {exc}")
        return 2

    result = orchestrator.run(args.business_id, build_registry(args.sources))

    manifest = json.dumps(result.to_dict(), indent=2, ensure_ascii=False)
    if args.output is not None:
        args.output.write_text(manifest + "\n", encoding="utf-8")
    else:
        print(manifest)

    return 0 if result.success else 2


if __name__ == "__main__":
    raise SystemExit(main())
