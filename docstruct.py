#!/usr/bin/env python3
"""
docstruct: Infers document structure from the text layout of a PDF.

Positioned text fragments are read page by page, grouped into lines and
blocks, classified as headings, lists, tables or paragraphs, and written
out as Markdown and/or JSON. Tables can additionally be detected from the
raw column alignment of each page.
"""

import argparse
import json
import logging
import os
import sys
import time
from dataclasses import asdict, replace

# --- Dependency Imports ---
try:
    from rich.console import Console
    from rich.markup import escape
    from rich.progress import BarColumn, Progress, TextColumn, TimeElapsedColumn
    from rich.table import Table
except ImportError as e:
    print(f"Error: Missing required library. -> {e}")
    print("Please install all core dependencies with:")
    print("pip install pdfminer.six rich")
    sys.exit(1)

# --- Local Application Imports ---
from core.log_utils import ContextFilter, setup_logging
from docstruct_lib.api import extract_pdf_structure, parse_page_selection
from docstruct_lib.config import ConfigService
from docstruct_lib.errors import FatalSourceFailure
from docstruct_lib.profile import profile_document
from docstruct_lib.render import format_table_for_display, render_markdown, result_to_dict

app_log = logging.getLogger("docstruct")


# --- CUSTOM ARGPARSE FORMATTER ---
class CustomHelpFormatter(
    argparse.ArgumentDefaultsHelpFormatter, argparse.RawTextHelpFormatter
):
    """
    A custom argparse formatter that combines showing default values with
    preserving newline formatting in help text.
    """

    pass


class Application:
    """Orchestrates the structure extraction workflow based on command-line arguments."""

    DEFAULT_FILENAME_SENTINEL = "__DEFAULT_FILENAME__"
    DEFAULT_CONFIG_FILE = "docstruct.cfg"

    def __init__(self, args, console=None):
        self.args = args
        self.console = console or Console(stderr=True)
        self.result = None

    def run(self):
        """Main entry point for the application logic."""
        setup_logging(
            project_name="docstruct",
            level=logging.INFO if self.args.verbose else logging.WARNING,
            color_logs=self.args.color_logs,
            debug_topics=self.args.debug_topics,
            log_file=self.args.log_file,
        )
        log_filter = ContextFilter(os.path.basename(self.args.pdf_file))
        handlers = logging.getLogger().handlers[:]
        for handler in handlers:
            handler.addFilter(log_filter)

        try:
            options = self._build_options()
            if self.args.save_config:
                self._save_config(options)
            self._resolve_output_filenames()

            start = time.monotonic()
            self.result = self._extract(options)
            app_log.info("Extraction finished in %.1f seconds.", time.monotonic() - start)

            self._save_markdown()
            self._save_json()
            self._display_summary()
            if options.extract_tables:
                self._display_tables()
        finally:
            for handler in handlers:
                handler.removeFilter(log_filter)

    def _build_options(self):
        """Loads options from the config file and applies command-line overrides."""
        options = ConfigService(self.args.config).get_extraction_options()
        overrides = {}
        if self.args.tables:
            overrides["extract_tables"] = True
        if self.args.ocr_threshold is not None:
            overrides["ocr_text_threshold"] = self.args.ocr_threshold
        if self.args.heading_keywords is not None:
            overrides["heading_keywords"] = tuple(
                k.strip() for k in self.args.heading_keywords.split(",") if k.strip()
            )
        pages = parse_page_selection(self.args.pages)
        if pages is None and self.args.pages.lower() != "all":
            sys.exit(1)
        if pages is not None:
            overrides["pages"] = frozenset(pages)
        if overrides:
            options = replace(options, **overrides)
        app_log.debug("Extraction options: %s", options)
        return options

    def _save_config(self, options):
        """Writes the effective extraction options back to the config file."""
        ConfigService(self.args.config).save_settings(
            {
                "Extraction": {
                    "extract_tables": str(options.extract_tables).lower(),
                    "ocr_text_threshold": options.ocr_text_threshold,
                    "heading_keywords": ", ".join(options.heading_keywords),
                }
            }
        )

    def _resolve_output_filenames(self):
        """Sets default output filenames based on the input PDF name."""
        S = self.DEFAULT_FILENAME_SENTINEL
        pdf_base = os.path.splitext(os.path.basename(self.args.pdf_file))[0]
        if self.args.output_file == S:
            self.args.output_file = f"{pdf_base}.md"
        if self.args.json_file == S:
            self.args.json_file = f"{pdf_base}.json"

    def _extract(self, options):
        """Runs the extraction behind a progress bar."""
        progress = Progress(
            TextColumn("[bold blue]{task.description}"),
            BarColumn(),
            TextColumn("{task.percentage:>3.0f}%"),
            TextColumn("page {task.fields[page]}/{task.fields[pages]}"),
            TimeElapsedColumn(),
            console=self.console,
            transient=True,
        )
        with progress:
            task = progress.add_task("Extracting", total=100, page="-", pages="-")

            def on_progress(percent, page, total_pages):
                progress.update(task, completed=percent, page=page, pages=total_pages)

            return extract_pdf_structure(self.args.pdf_file, options, on_progress=on_progress)

    def _save_markdown(self):
        """Saves the rendered Markdown if requested."""
        if not self.args.output_file:
            return
        try:
            with open(self.args.output_file, "w", encoding="utf-8") as f:
                f.write(render_markdown(self.result))
            app_log.info("Markdown saved to: '%s'", self.args.output_file)
        except IOError as e:
            app_log.error("Error saving Markdown: %s", e)

    def _save_json(self):
        """Saves the full result as JSON if requested."""
        if not self.args.json_file:
            return
        data = result_to_dict(self.result, include_fragments=self.args.include_fragments)
        data["profile"] = asdict(profile_document(self.result))
        try:
            with open(self.args.json_file, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
            app_log.info("JSON saved to: '%s'", self.args.json_file)
        except IOError as e:
            app_log.error("Error saving JSON: %s", e)

    def _display_summary(self):
        """Prints run statistics, the document profile and any page problems."""
        stats = self.result.stats
        profile = profile_document(self.result)
        counts = {}
        for block in self.result.structured_blocks:
            counts[block.kind.value] = counts.get(block.kind.value, 0) + 1

        table = Table(title=f"docstruct: {os.path.basename(self.args.pdf_file)}")
        table.add_column("Metric", style="bold")
        table.add_column("Value", justify="right")
        table.add_row("Pages (processed/total)", f"{stats.processed_pages}/{stats.total_pages}")
        table.add_row("Text pages", str(stats.text_pages))
        table.add_row("Scanned pages", str(stats.scanned_pages))
        table.add_row("Text length", str(stats.total_text_length))
        for kind in sorted(counts):
            table.add_row(f"Blocks: {kind}", str(counts[kind]))
        table.add_row("Detected tables", str(len(self.result.tables)))
        table.add_row("Document type", profile.document_type)
        table.add_row("Text density", f"{profile.text_density:.1f}")
        table.add_row("Processing time", f"{stats.processing_time_ms:.0f} ms")
        self.console.print(table)

        for error in stats.errors:
            self.console.print(f"[red]Page {error.page}:[/red] {escape(error.message)}")
        for warning in stats.warnings:
            self.console.print(f"[yellow]Warning:[/yellow] {escape(warning)}")

    def _display_tables(self):
        """Prints every detected table as a padded plain-text grid."""
        for i, grid in enumerate(self.result.tables, start=1):
            self.console.print(
                f"\n[bold]Table {i}[/bold] (page {grid.page}, "
                f"{len(grid.rows)}x{grid.num_cols}, confidence {grid.confidence:.2f})"
            )
            for line in format_table_for_display(grid):
                self.console.print(line, markup=False, highlight=False)

    @staticmethod
    def parse_arguments(args=None):
        """Parses command-line arguments for the script."""
        examples = [
            "\nExamples:",
            "  python docstruct.py document.pdf -o",
            '  python docstruct.py document.pdf -p 1-3 -T -j "out.json"',
            "  python docstruct.py document.pdf -c my.cfg --heading-keywords Capitulo,Anexo",
            "  python docstruct.py document.pdf -T --ocr-threshold 80 --save-config",
            "  python docstruct.py document.pdf -d layout,tables --color-logs",
        ]
        parser = argparse.ArgumentParser(
            description="Infers headings, lists, tables and paragraphs from PDF layout.",
            formatter_class=CustomHelpFormatter,
            add_help=False,
            epilog="\n".join(examples),
        )
        S = Application.DEFAULT_FILENAME_SENTINEL

        g_opts = parser.add_argument_group("Main Options")
        g_opts.add_argument("pdf_file", help="Path to the input PDF file.")
        g_opts.add_argument(
            "-h",
            "--help",
            action="help",
            help="Show this help message and exit.",
        )

        g_proc = parser.add_argument_group("Processing Control")
        g_proc.add_argument(
            "-p",
            "--pages",
            default="all",
            metavar="PAGES",
            help="Pages to process (e.g., '1,3,5-7'). (default: %(default)s)",
        )
        g_proc.add_argument(
            "-T",
            "--tables",
            action="store_true",
            help="Detect tables from column alignment on every page.",
        )
        g_proc.add_argument(
            "-c",
            "--config",
            default=Application.DEFAULT_CONFIG_FILE,
            metavar="FILE",
            help="INI file with an [Extraction] section. (default: %(default)s)",
        )
        g_proc.add_argument(
            "--ocr-threshold",
            type=int,
            default=None,
            metavar="CHARS",
            help="Flag pages with less text than this and graphics as needing OCR.",
        )
        g_proc.add_argument(
            "--heading-keywords",
            default=None,
            metavar="WORDS",
            help="Comma-separated words that start a heading (e.g. 'Chapter,Part').",
        )
        g_proc.add_argument(
            "--save-config",
            action="store_true",
            help="Save the effective options (except pages) to the config file.",
        )

        g_out = parser.add_argument_group("Script Output & Actions")
        g_out.add_argument(
            "-o",
            "--output-file",
            nargs="?",
            const=S,
            default=None,
            metavar="FILE",
            help="Save Markdown output. Defaults to PDF name.",
        )
        g_out.add_argument(
            "-j",
            "--json-file",
            nargs="?",
            const=S,
            default=None,
            metavar="FILE",
            help="Save the full result as JSON. Defaults to PDF name.",
        )
        g_out.add_argument(
            "--include-fragments",
            action="store_true",
            help="Include source fragments in the JSON output.",
        )
        g_out.add_argument(
            "--log-file",
            metavar="FILE",
            default=None,
            help="Redirect all logging output to a specified file.",
        )
        g_out.add_argument(
            "--color-logs",
            action="store_true",
            help="Enable colored logging output. (default: %(default)s)",
        )
        g_out.add_argument(
            "-v",
            "--verbose",
            action="store_true",
            help="Enable INFO logging for detailed progress. (default: %(default)s)",
        )
        g_out.add_argument(
            "-d",
            "--debug",
            nargs="?",
            const="all",
            dest="debug_topics",
            metavar="TOPICS",
            help="Enable DEBUG logging (all,layout,structure,tables,assemble,source,config).",
        )

        return parser.parse_args(args)


def main():
    """Main entry point for the script."""
    # Basic logging config for early errors before full setup
    logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")

    try:
        args = Application.parse_arguments(sys.argv[1:])
        app = Application(args)
        app.run()
    except (FileNotFoundError, FatalSourceFailure) as e:
        app_log.critical(str(e))
        sys.exit(1)
    except KeyboardInterrupt:
        app_log.info("\nProcess interrupted by user. Exiting.")
        sys.exit(0)
    except Exception as e:
        app_log.critical("\nAn unexpected error occurred: %s", e, exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
