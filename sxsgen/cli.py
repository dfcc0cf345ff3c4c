"""CLI entrypoints for sxsgen commands."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List

from .config import ConfigError, DirectoryConfig, SxsGenConfig, load_config
from .errors import ManifestError
from .logging import configure_logging, get_logger
from .orchestrator import GenerationRequest, ManifestOrchestrator, SourceMode, merge_override_lines
from .service import run_service

MAN_FILE_SUFFIX = ".man"


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    if suppress_default:
        kwargs["default"] = argparse.SUPPRESS
    else:
        kwargs["default"] = False
    parser.add_argument(
        "-v",
        "--verbose",
        **kwargs,
    )
    parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        default=argparse.SUPPRESS if suppress_default else False,
        help="Only report warnings and errors.",
    )


def _add_common_options(parser: argparse.ArgumentParser) -> None:
    _add_verbose_option(parser, suppress_default=True)
    parser.add_argument(
        "--out",
        type=Path,
        default=None,
        help="Write the manifest to this file instead of stdout.",
    )
    parser.add_argument(
        "--snapshot",
        type=Path,
        default=None,
        help="Read registrations and binary metadata from a YAML snapshot instead of the registry.",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to .sxsgen.yml (defaults to the input's directory).",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Also write diagnostics to this file.",
    )


def _add_inline_option(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--inline",
        action="store_true",
        default=None,
        help=(
            "Emit <file> elements with COM class information for external references "
            "instead of <dependentAssembly> elements."
        ),
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sxsgen",
        description="Create side-by-side manifests for a project, a dll/exe/ocx, or a multi-file assembly.",
    )
    _add_verbose_option(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    project_parser = subparsers.add_parser(
        "project",
        help="Create a manifest for a Visual Basic 6 project file.",
    )
    _add_common_options(project_parser)
    _add_inline_option(project_parser)
    project_parser.add_argument("project", type=Path, help="Path to the .vbp project file.")
    project_parser.add_argument(
        "--v6cc",
        action="store_true",
        default=None,
        help="The project uses version 6 of the Windows Common Controls (exe projects only).",
    )
    project_parser.add_argument(
        "--dep",
        type=Path,
        default=None,
        help=(
            "File of dependent assemblyIdentity elements, one per line, used instead of the "
            "project's references (merged with <project>.man when present)."
        ),
    )

    binary_parser = subparsers.add_parser(
        "binary",
        help="Create a manifest for an exe, dll or ocx file.",
    )
    _add_common_options(binary_parser)
    binary_parser.add_argument("binary", type=Path, help="Path to the compiled binary.")
    binary_parser.add_argument("--desc", default="", help="Text for the manifest's description element.")

    assembly_parser = subparsers.add_parser(
        "assembly",
        help="Create a multi-file assembly manifest for the projects and binaries listed in a file.",
    )
    _add_common_options(assembly_parser)
    _add_inline_option(assembly_parser)
    _add_assembly_arguments(assembly_parser)
    assembly_parser.add_argument(
        "filenames",
        type=Path,
        help="File listing one project, dll or ocx per line (blank lines and // comments ignored).",
    )

    identities_parser = subparsers.add_parser(
        "identities",
        help="Create a manifest whose dependencies are the assemblyIdentity elements listed in a file.",
    )
    _add_common_options(identities_parser)
    _add_assembly_arguments(identities_parser)
    identities_parser.add_argument(
        "dependencies",
        type=Path,
        help="File of assemblyIdentity elements, one per line.",
    )

    serve_parser = subparsers.add_parser(
        "serve",
        help="Run the HTTP service that generates manifests on request.",
    )
    _add_verbose_option(serve_parser, suppress_default=True)
    serve_parser.add_argument("--host", default="127.0.0.1", help="Interface to bind.")
    serve_parser.add_argument("--port", type=int, default=8000, help="Port to listen on.")

    return parser


def _add_assembly_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("name", help="Assembly name.")
    parser.add_argument("version", help="Assembly version in major.minor.build.revision form.")
    parser.add_argument("description", help="Assembly description.")


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for sxsgen commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(
        verbose=bool(args.verbose),
        quiet=bool(args.quiet),
        log_file=getattr(args, "log_file", None),
    )
    logger = get_logger("cli")

    if args.command == "serve":
        logger.info("Serving manifests on %s:%d", args.host, args.port)
        run_service(host=args.host, port=args.port)
        return

    try:
        config = _load_effective_config(args)
        request = _build_request(args, config)
        orchestrator = ManifestOrchestrator.from_config(config)
        data = orchestrator.generate(request)
    except FileNotFoundError as exc:
        parser.exit(1, f"Invalid argument: {exc}\n")
    except ManifestError as exc:
        parser.exit(1, f"sxsgen: {exc.kind}: {exc}\n")
    except ConfigError as exc:
        parser.exit(1, f"sxsgen: configuration error: {exc}\n")
    except ModuleNotFoundError as exc:
        parser.exit(
            1,
            f"sxsgen: {exc.name} is not available; the registry backend needs Windows. "
            "Use --snapshot to generate from a registry snapshot.\n",
        )

    output_path = args.out or config.output_path
    if output_path is not None:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_bytes(data.getvalue())
        logger.info("Manifest written to %s", output_path)
    else:
        sys.stdout.write(data.getvalue().decode("utf-8"))
        sys.stdout.flush()


def _load_effective_config(args: argparse.Namespace) -> SxsGenConfig:
    if args.config is not None:
        config = load_config(args.config)
    else:
        config = load_config(_input_directory(args))
    if args.snapshot is not None:
        config.directory = DirectoryConfig(backend="snapshot", snapshot=args.snapshot)
    return config


def _input_directory(args: argparse.Namespace) -> Path:
    for attribute in ("project", "binary", "filenames", "dependencies"):
        value = getattr(args, attribute, None)
        if value is not None:
            return Path(value).expanduser().resolve().parent
    return Path.cwd()


def _build_request(args: argparse.Namespace, config: SxsGenConfig) -> GenerationRequest:
    inline = config.inline_external_objects if getattr(args, "inline", None) is None else bool(args.inline)

    if args.command == "project":
        project: Path = args.project
        if not project.is_file():
            raise FileNotFoundError(f"file {project} does not exist")
        sources: List[List[str]] = []
        man_file = project.with_name(project.name + MAN_FILE_SUFFIX)
        if man_file.is_file():
            sources.append(read_lines(man_file))
        if args.dep is not None:
            sources.append(read_lines(args.dep))
        use_common_controls = config.use_common_controls if args.v6cc is None else bool(args.v6cc)
        return GenerationRequest(
            mode=SourceMode.PROJECT,
            source=project,
            inline=inline,
            use_common_controls=use_common_controls,
            dependency_overrides=merge_override_lines(*sources),
        )

    if args.command == "binary":
        if not args.binary.is_file():
            raise FileNotFoundError(f"file {args.binary} does not exist")
        return GenerationRequest(mode=SourceMode.BINARY, source=args.binary, description=args.desc)

    if args.command == "assembly":
        files = merge_override_lines(read_lines(args.filenames)) or ()
        return GenerationRequest(
            mode=SourceMode.FILE_SET,
            files=files,
            base_dir=args.filenames.expanduser().resolve().parent,
            assembly_name=args.name,
            assembly_version=args.version,
            description=args.description,
            inline=inline,
        )

    if args.command == "identities":
        return GenerationRequest(
            mode=SourceMode.EXPLICIT_IDENTITIES,
            assembly_name=args.name,
            assembly_version=args.version,
            description=args.description,
            dependency_overrides=merge_override_lines(read_lines(args.dependencies)),
        )

    raise ValueError(f"Unknown command {args.command}")  # pragma: no cover - argparse enforces choices


def read_lines(path: Path) -> List[str]:
    """Return the stripped lines of ``path``; raises FileNotFoundError when missing."""
    if not path.is_file():
        raise FileNotFoundError(f"file {path} does not exist")
    return [line.strip() for line in path.read_text(encoding="utf-8", errors="replace").splitlines()]


if __name__ == "__main__":  # pragma: no cover
    main()


__all__ = ["main", "read_lines"]
