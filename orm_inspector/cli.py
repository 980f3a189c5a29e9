import argparse
import logging
import sys
from pathlib import Path
from typing import Dict, List, Optional

from orm_inspector.config import ToolConfigSchema, load_config
from orm_inspector.constants import OutputFiles
from orm_inspector.data_gen import DataCodegenConfig, GeneratedData, generate_data
from orm_inspector.domain.closure import collect_tables
from orm_inspector.domain.introspection import SchemaIntrospector
from orm_inspector.domain.mapping_models import EntityDef
from orm_inspector.domain.models import QualifiedName
from orm_inspector.domain.naming import NAMING_STYLES, REVERSE_NAMING_STYLES
from orm_inspector.domain.type_mapping import MK_TYPES, TypeMappingConfig
from orm_inspector.emitters import generate_declarations_code, show_mappings
from orm_inspector.exceptions import OrmInspectorError
from orm_inspector.mapper import generate_mapping
from orm_inspector.minimizer import minimize_mapping
from orm_inspector.colored_logging import (
    setup_colored_logging,
    log_success,
    log_progress,
    log_highlight,
    log_section,
)


logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="orm-inspector",
        description="Reverse-engineer a database schema into record declarations and ORM mapping definitions.",
    )
    parser.add_argument(
        "-c",
        "--config",
        help="Path to the YAML configuration file (containing Django DATABASES dict).",
    )
    parser.add_argument(
        "-o",
        "--output-dir",
        dest="output_dir",
        help="Directory for the generated files. Overrides config file setting.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose DEBUG logging.",
    )
    parser.add_argument(
        "--no-color",
        action="store_true",
        help="Disable colored output (useful for CI/CD environments).",
    )
    parser.add_argument(
        "--no-minimize",
        dest="minimize",
        action="store_false",
        default=None,
        help="Keep every generated mapping value instead of removing baseline defaults.",
    )
    return parser


def run_pipeline(config: ToolConfigSchema, introspector: SchemaIntrospector) -> Dict[str, str]:
    """
    Reverse-engineer the configured schema.

    Returns:
        Generated file contents keyed by file name
    """
    strategy = REVERSE_NAMING_STYLES[config.naming_style]()

    log_section(logger, "Table closure")
    log_progress(logger, "Collecting tables and everything they reference...")
    tables = collect_tables(introspector, config.include_predicate(), config.schema_name)
    if not tables:
        logger.warning("No tables matched the configured filters.")
    log_highlight(logger, f"Found {len(tables)} tables: {', '.join(str(name) for name in tables)}")

    log_section(logger, "Declarations")
    data_config = DataCodegenConfig(
        generate_unique_key_phantoms=config.generate_unique_key_phantoms,
        mk_type=MK_TYPES[config.type_mapping],
        type_mapping=TypeMappingConfig(native_int_width=config.native_int_width),
    )
    data: Dict[QualifiedName, GeneratedData] = generate_data(data_config, strategy, tables)
    declarations_code = generate_declarations_code(data)
    log_success(logger, f"Generated {len(data)} record declarations")

    log_section(logger, "Mappings")
    entities: Dict[QualifiedName, EntityDef] = generate_mapping(strategy, introspector.dialect, tables)
    if config.minimize:
        style = NAMING_STYLES[config.baseline_style]()
        log_progress(logger, f"Minimizing mappings against the {config.baseline_style} naming style...")
        entities = {
            name: minimize_mapping(style, data[name].declaration, entity)
            for name, entity in entities.items()
        }
    mapping_document = show_mappings(entities.values(), config.output_format)
    log_success(logger, f"Generated {len(entities)} mapping definitions")

    return {
        OutputFiles.DECLARATIONS: declarations_code,
        f"{OutputFiles.MAPPING_STEM}.{config.output_format}": mapping_document,
    }


def write_outputs(output_dir: str, files: Dict[str, str]) -> List[Path]:
    target = Path(output_dir)
    target.mkdir(parents=True, exist_ok=True)
    written = []
    for file_name, content in files.items():
        path = target / file_name
        path.write_text(content, encoding="utf-8")
        logger.info(f"Generated file: {path}")
        written.append(path)
    return written


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    log_level = logging.DEBUG if args.verbose else logging.INFO
    setup_colored_logging(level=log_level, use_colors=not args.no_color)
    if args.verbose:
        logger.debug("Verbose mode enabled. DEBUG level logging activated.")

    try:
        log_progress(logger, "Loading configuration...")
        config = load_config(args.config, args)
        log_success(logger, "Configuration loaded and validated successfully.")
        logger.debug(f"Effective configuration loaded: {config.model_dump(exclude={'SECRET_KEY', 'databases'})}")

        # Django is only needed for live introspection
        from orm_inspector.introspection_django import DjangoSchemaIntrospector, setup_django

        log_progress(logger, "Configuring Django settings for introspection...")
        setup_django(config.databases, config.SECRET_KEY)

        files = run_pipeline(config, DjangoSchemaIntrospector())
        write_outputs(config.output_dir, files)

        log_section(logger, "Completion")
        log_success(logger, f"Reverse mapping written to {config.output_dir}")
        return 0

    # --- Error Handling ---
    except OrmInspectorError as e:
        logger.error(str(e), exc_info=args.verbose)
        return 1
    except ImportError as e:
        logger.error(
            f"Import Error: {e}. Ensure Django and necessary database drivers are installed.",
            exc_info=args.verbose,
        )
        logger.error("Example: pip install 'orm-inspector[postgres]' (for PostgreSQL)")
        return 1
    except Exception as e:
        # Always show the traceback of unexpected errors
        logger.error(f"An unexpected error occurred during generation: {e}", exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
