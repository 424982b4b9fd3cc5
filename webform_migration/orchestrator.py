"""Migration orchestrator - drives a complete webform migration run."""

import json
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

from .models.legacy import LegacyForm
from .models.form import AssembledForm
from .models.migration import (
    MigrationConfig,
    MigrationRun,
    FormMigrationStep,
    MigrationStatus,
    TargetKind,
)
from .models.errors import (
    ConnectivityError,
    ErrorLog,
    MigrationError,
    MissingDataError,
)
from .services.assembler import FormAssembler
from .services.field_mapper import FieldTypeMapper
from .services.validator import FormValidator, warnings_of
from .services.watermark import WatermarkStore
from .extractors.base import BaseExtractor
from .extractors.sql_extractor import SQLExtractor
from .extractors.json_extractor import JSONExtractor
from .loaders.base import BaseLoader
from .loaders.api_loader import APILoader
from .loaders.file_loader import FileLoader

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class FormOutcome:
    """What assembling one form produced; each form owns its error log."""
    form: LegacyForm
    step: FormMigrationStep
    assembled: Optional[AssembledForm] = None
    errors: ErrorLog = field(default_factory=ErrorLog)


class MigrationOrchestrator:
    """
    Orchestrates a webform migration run.

    Handles:
    - Connection test against the legacy source
    - Per-form assembly (optionally on a thread pool)
    - Validation and hand-off to the loader, or reporting in simulate mode
    - Optional purge of target submissions before import
    - Watermark bookkeeping
    - Error collection and the run report
    """

    def __init__(
        self,
        config: MigrationConfig,
        extractor: Optional[BaseExtractor] = None,
        loader: Optional[BaseLoader] = None,
        watermark_store: Optional[WatermarkStore] = None
    ):
        """
        Initialize the orchestrator.

        Args:
            config: Migration configuration
            extractor: Legacy data source (built from the config when omitted)
            loader: Target form store (built from the config when omitted)
            watermark_store: Watermark store (config.state_file when omitted)
        """
        self.config = config
        self.extractor = extractor or self._create_extractor()
        self.loader = loader
        self.watermark_store = watermark_store or WatermarkStore(config.state_file)
        self.validator = FormValidator()
        self.assembler = FormAssembler(
            self.extractor,
            mapper=FieldTypeMapper(token_rewrites=config.token_rewrites),
        )

        # Runtime state
        self.run: Optional[MigrationRun] = None
        self.errors = ErrorLog()

        self.logs_dir = Path(self.config.output_dir) / "logs"

    def run_migration(self) -> MigrationRun:
        """
        Run the complete migration.

        Returns:
            MigrationRun with results and statistics
        """
        self.run = MigrationRun(
            name=self.config.name,
            simulate=self.config.simulate,
        )
        self.errors = ErrorLog()
        self.run.started_at = utcnow()
        self.run.status = MigrationStatus.EXTRACTING

        try:
            logger.info("=== CONNECTION TEST ===")
            forms = self._select_forms()

            watermark = self.watermark_store.read()
            self.run.watermark_before = watermark
            logger.info(f"Importing submissions after id {watermark}")

            if not self.config.simulate:
                if self.loader is None:
                    self.loader = self._create_loader()
                if not self.loader.validate_connection():
                    raise ConnectivityError("Failed to connect to the target form service")

            after_id = watermark
            if self.config.purge_submissions:
                # Purged forms are re-imported in full
                after_id = 0
                logger.info("Purging target submissions, importing every submission again")

            logger.info("=== FORMS ===")
            self.run.status = MigrationStatus.ASSEMBLING
            max_seen = self._migrate_forms(forms, after_id)

            if self.config.simulate:
                self.run.status = MigrationStatus.SIMULATED
                self.run.watermark_after = watermark
                logger.info("=== SIMULATION COMPLETED ===")
            else:
                failed = [step for step in self.run.steps if step.status == MigrationStatus.FAILED]
                if failed:
                    # Failed forms are retried from the same watermark
                    message = (
                        f"Watermark held at {watermark}: {len(failed)} form(s) failed, "
                        f"their submissions will be imported on the next run"
                    )
                    logger.warning(message)
                    self.errors.add(message)
                    self.run.watermark_after = watermark
                elif max_seen is not None and max_seen > watermark:
                    self.watermark_store.write(max_seen)
                    self.run.watermark_after = max_seen
                else:
                    self.run.watermark_after = watermark
                self.run.status = MigrationStatus.COMPLETED
                logger.info("=== MIGRATION COMPLETED ===")

        except MigrationError as e:
            logger.error(f"Migration failed: {e}")
            self.run.status = MigrationStatus.FAILED
            self.errors.add(str(e))

        finally:
            self.run.completed_at = utcnow()
            self.run.update_totals()
            self.run.errors = self.errors.messages
            if self.config.save_report:
                self._save_report()

        return self.run

    def _select_forms(self) -> List[LegacyForm]:
        """Test the legacy connection and pick the forms of this run."""
        if self.config.form_identifier is None:
            return self.extractor.test_connection()

        forms = self.extractor.list_forms(self.config.form_identifier)
        if not forms:
            raise MissingDataError(f"Could not find any webform with id {self.config.form_identifier}")
        return forms

    def _migrate_forms(self, forms: List[LegacyForm], watermark: int) -> Optional[int]:
        """
        Assemble and load every form.

        Returns:
            Highest submission id observed on forms that completed, or None
        """
        outcomes = [FormOutcome(form=form, step=self.run.add_step(form.form_id, form.title)) for form in forms]

        if self.config.parallel_workers > 1 and len(outcomes) > 1:
            logger.info(f"Assembling {len(outcomes)} forms on {self.config.parallel_workers} workers")
            with ThreadPoolExecutor(max_workers=self.config.parallel_workers) as pool:
                futures = [pool.submit(self._assemble_form, outcome, watermark) for outcome in outcomes]
                # Results are consumed in form order; a ConnectivityError re-raises here
                for future in futures:
                    future.result()
            for outcome in outcomes:
                self._load_form(outcome)
        else:
            for outcome in outcomes:
                self._assemble_form(outcome, watermark)
                self._load_form(outcome)

        max_seen = None
        for outcome in outcomes:
            if outcome.step.status == MigrationStatus.FAILED or outcome.assembled is None:
                continue
            observed = outcome.assembled.max_submission_id
            if observed is not None and (max_seen is None or observed > max_seen):
                max_seen = observed
        return max_seen

    def _assemble_form(self, outcome: FormOutcome, watermark: int) -> FormOutcome:
        """Assemble one form; failures are recorded on the outcome."""
        step = outcome.step
        step.status = MigrationStatus.ASSEMBLING
        step.started_at = utcnow()

        try:
            outcome.assembled = self.assembler.assemble(
                outcome.form,
                watermark=watermark,
                max_submissions=self.config.max_submissions,
            )
            step.elements_migrated = len(outcome.assembled.elements)
            step.warnings.extend(outcome.assembled.notices)

        except ConnectivityError:
            step.status = MigrationStatus.FAILED
            step.completed_at = utcnow()
            raise

        except MigrationError as e:
            step.status = MigrationStatus.FAILED
            step.errors.append(str(e))
            step.completed_at = utcnow()
            outcome.errors.add(f"{outcome.form.form_identifier}: {e}")
            logger.error(f"Assembly failed for {outcome.form.form_identifier}: {e}")

        return outcome

    def _load_form(self, outcome: FormOutcome) -> None:
        """Validate an assembled form and hand it to the loader (or report it)."""
        step = outcome.step
        assembled = outcome.assembled

        try:
            if assembled is None:
                return

            form_identifier = assembled.form_identifier
            step.warnings.extend(warnings_of(self.validator.check(assembled)))
            step.submissions_processed = len(assembled.submissions)

            if self.config.simulate:
                self._report_simulated(assembled)
                step.status = MigrationStatus.SIMULATED
                return

            step.status = MigrationStatus.LOADING
            self.loader.save_form(assembled)

            if self.config.purge_submissions:
                self.loader.delete_submissions(form_identifier, self.config.delete_chunk_size)

            result = self.loader.save_submissions(form_identifier, assembled.submissions)
            step.submissions_succeeded = result.total_succeeded
            step.submissions_failed = result.total_failed
            step.submissions_skipped = result.total_skipped
            for error in result.errors:
                outcome.errors.add(
                    f"{form_identifier}: submission {error['legacy_submission_id']} failed: {error['error']}"
                )

            step.status = MigrationStatus.COMPLETED
            logger.info(
                f"Migrated {form_identifier}: {step.elements_migrated} root elements, "
                f"{step.submissions_succeeded}/{step.submissions_processed} submissions"
            )

        except ConnectivityError:
            step.status = MigrationStatus.FAILED
            raise

        except Exception as e:
            step.status = MigrationStatus.FAILED
            step.errors.append(str(e))
            outcome.errors.add(f"{outcome.form.form_identifier}: {e}")
            logger.error(f"Migration failed for {outcome.form.form_identifier}: {e}")

        finally:
            step.completed_at = utcnow()
            self.errors.merge(outcome.errors)

    def _report_simulated(self, assembled: AssembledForm) -> None:
        """Log what a real run would write."""
        logger.info(f"[simulate] {assembled.form_identifier} '{assembled.title}'")
        logger.info(json.dumps(assembled.to_dict(), indent=2, default=str))
        if self.config.purge_submissions:
            logger.info(f"[simulate] Would purge existing submissions of {assembled.form_identifier}")

    def _create_extractor(self) -> BaseExtractor:
        """Create an extractor for the configured legacy source."""
        if self.config.database_url:
            return SQLExtractor(database_url=self.config.database_url)
        elif self.config.source_file:
            return JSONExtractor(self.config.source_file)
        else:
            raise ValueError("No legacy source configured: set database_url or source_file")

    def _create_loader(self) -> BaseLoader:
        """Create a loader for the configured target."""
        if self.config.target == TargetKind.API:
            return APILoader(
                base_url=self.config.target_url or "",
                api_key=self.config.target_api_key,
                batch_size=self.config.batch_size,
            )
        return FileLoader(
            output_dir=self.config.output_dir,
            batch_size=self.config.batch_size,
        )

    def error_summary(self) -> List[str]:
        """Get the deduplicated errors of the last run."""
        return self.errors.messages

    def _save_report(self):
        """Save the migration report."""
        self.logs_dir.mkdir(parents=True, exist_ok=True)
        filepath = self.logs_dir / f"migration_report_{utcnow().strftime('%Y%m%d_%H%M%S')}.json"
        with open(filepath, 'w') as f:
            json.dump(self.run.to_dict(), f, indent=2, default=str)
        logger.info(f"Saved migration report to {filepath}")

    def preview_form(self, form_id: int, watermark: Optional[int] = None) -> AssembledForm:
        """Assemble a single form without touching the target."""
        forms = self.extractor.list_forms(form_id)
        if not forms:
            raise MissingDataError(f"Could not find any webform with id {form_id}")
        if watermark is None:
            watermark = self.watermark_store.read()
        return self.assembler.assemble(
            forms[0],
            watermark=watermark,
            max_submissions=self.config.max_submissions,
        )

    def close(self) -> None:
        self.extractor.close()
