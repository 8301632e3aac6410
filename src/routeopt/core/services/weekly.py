"""
Weekly run service.

One run: collect pricing, discover task types, optimize the routing
document, write the markdown report and preview the edits. A dry run
only notifies. An apply run expires older batches, opens a new approval
batch with one item per edited line and sends the approval messages;
nothing is written to the routing document until the batch is confirmed
through the callback service.

Usage:
    >>> service = WeeklyRunService.from_config(load_config())
    >>> result = service.run(RunMode.DRY_RUN)
    >>> result.modified_count
    3
"""

import logging
import re
from collections.abc import Callable
from datetime import datetime
from pathlib import Path

from routeopt.core.approval.store import ApprovalBatchStore
from routeopt.core.catalog import RoutingTables
from routeopt.core.config.models import RouteoptConfig
from routeopt.core.discovery.service import DiscoveryService
from routeopt.core.exceptions import NotificationError
from routeopt.core.fileio import atomic_write_text, filesystem_stamp, iso_timestamp, utc_now
from routeopt.core.notify.messages import business_summary, item_approval, stage_report_attachment
from routeopt.core.notify.messenger import Notifier
from routeopt.core.optimizer.engine import RecommendationEngine
from routeopt.core.optimizer.models import Constraints
from routeopt.core.optimizer.report import generate_report
from routeopt.core.pricing.service import PricingService
from routeopt.core.routing.apply import update_routing_config
from routeopt.core.routing.parser import read_document, resolve_home_path
from routeopt.core.services import wiring
from routeopt.core.services.models import RunMode, WeeklyRunResult

logger = logging.getLogger(__name__)

SUPERSEDED_REASON = "superseded-by-new-run"
RELEASE_BRANCHES = ("main", "develop")
RELEASE_BRANCH_PREFIXES = ("feature/", "release/", "hotfix/")


def report_stamp(moment: datetime) -> str:
    """'2026-02-01T09:30:00.123Z' -> '2026-02-01T09-30-00Z'"""
    return re.sub(r"\.\d+Z$", "Z", iso_timestamp(moment)).replace(":", "-")


def current_branch(directory: Path) -> str:
    """
    Branch checked out in directory.

    Reads .git/HEAD directly. A detached HEAD gives the short commit id;
    a missing or unreadable HEAD gives "unknown".
    """
    try:
        head = (Path(directory) / ".git" / "HEAD").read_text(encoding="utf-8").strip()
    except OSError:
        return "unknown"
    if head.startswith("ref:"):
        return head[len("ref:"):].strip().removeprefix("refs/heads/")
    return head[:7]


def is_release_branch(branch: str) -> bool:
    return branch in RELEASE_BRANCHES or branch.startswith(RELEASE_BRANCH_PREFIXES)


class WeeklyRunService:
    """
    Orchestrates the weekly optimization run.

    Not thread-safe; one instance drives one run at a time.
    """

    def __init__(
        self,
        *,
        tables: RoutingTables,
        pricing: PricingService,
        discovery: DiscoveryService,
        store: ApprovalBatchStore,
        notifier: Notifier,
        reports_dir: Path,
        soul_path: Path,
        constraints: Constraints | None = None,
        callback_namespace: str = "opt",
        callback_limit: int = 64,
        media_home: Path | None = None,
        repo_dir: Path | None = None,
        clock: Callable[[], datetime] = utc_now,
        on_step: Callable[[str], None] | None = None,
    ) -> None:
        """
        Prefer ``from_config``; use this constructor to inject test doubles.

        Args:
            media_home: Home directory whose .openclaw/media/outbound receives
                the report attachment (defaults to the user's home)
            repo_dir: Checkout whose branch is checked at the start of a run
                (defaults to the working directory)
            on_step: Called with a short description as each step starts
        """
        self.tables = tables
        self.pricing = pricing
        self.discovery = discovery
        self.store = store
        self.notifier = notifier
        self.reports_dir = Path(reports_dir)
        self.soul_path = Path(soul_path)
        self.engine = RecommendationEngine(tables, constraints)
        self.callback_namespace = callback_namespace
        self.callback_limit = callback_limit
        self.media_home = media_home
        self.repo_dir = Path(repo_dir) if repo_dir else Path.cwd()
        self.clock = clock
        self.on_step = on_step

    @classmethod
    def from_config(
        cls,
        config: RouteoptConfig,
        soul_path: Path | None = None,
        notifier: Notifier | None = None,
        on_step: Callable[[str], None] | None = None,
    ) -> "WeeklyRunService":
        tables = wiring.build_tables(config)
        return cls(
            tables=tables,
            pricing=wiring.build_pricing_service(config),
            discovery=wiring.build_discovery_service(config, tables),
            store=wiring.build_store(config),
            notifier=notifier or wiring.build_notifier(config),
            reports_dir=config.reports_path,
            soul_path=resolve_home_path(soul_path) if soul_path else config.soul_file,
            constraints=wiring.build_constraints(config),
            callback_namespace=config.notify.callback_namespace,
            callback_limit=config.notify.callback_limit,
            on_step=on_step,
        )

    def _step(self, description: str) -> None:
        logger.info(description)
        if self.on_step:
            self.on_step(description)

    def _write_report(self, markdown: str, now: datetime) -> tuple[Path, str | None]:
        report_path = self.reports_dir / f"weekly-{report_stamp(now)}.md"
        atomic_write_text(report_path, markdown)
        try:
            staged = str(stage_report_attachment(report_path, self.media_home))
        except OSError as e:
            logger.warning(f"Could not stage report attachment: {e}")
            staged = None
        return report_path, staged

    def _send_summary(self, result: WeeklyRunResult, media: str | None, sent_items: int) -> None:
        text = business_summary(
            mode=result.mode.value,
            report_path=result.report_path,
            models_analyzed=result.models_analyzed,
            actionable_count=result.modified_count,
            scored_count=result.recommendation_count,
            sent_items=sent_items,
        )
        try:
            self.notifier.send_message(text, media=media)
            result.summary_sent = True
        except NotificationError as e:
            logger.warning(f"Failed to send weekly summary: {e}")

    def run(self, mode: RunMode | str = RunMode.DRY_RUN) -> WeeklyRunResult:
        """
        Execute one weekly run.

        Raises:
            NoPricingDataError: Every provider returned zero models
            ParseError: The routing document cannot be read
            ValidationError: The proposed edits are not structurally safe
        """
        mode = RunMode(mode)
        now = self.clock()

        self._step("Checking branch")
        branch = current_branch(self.repo_dir)
        logger.info(f"Current branch: {branch}")
        if not is_release_branch(branch):
            logger.warning(f"Branch '{branch}' is outside main/develop/feature/release/hotfix naming")

        self._step("Collecting pricing data")
        pricing = self.pricing.fetch_all_pricing()
        summary = PricingService.summarize(pricing)
        models = PricingService.flatten(pricing)
        logger.info(f"Pricing collected: {summary.total} model(s) [{', '.join(summary.parts)}]")

        self._step("Discovering task types")
        document = read_document(self.soul_path, self.tables)
        discovery = self.discovery.discover_task_types(document.content)

        self._step("Optimizing routing")
        optimization = self.engine.optimize(document, models)

        self._step("Writing report")
        report_path, staged = self._write_report(generate_report(optimization), now)

        known_ids = set(self.tables.task_types) | discovery.taxonomy.task_ids()
        preview = update_routing_config(
            optimization.recommendations,
            self.soul_path,
            self.tables,
            dry_run=True,
            known_task_ids=known_ids,
        )
        logger.info(f"Preview diff prepared: {preview.modified_count} modified line(s)")

        result = WeeklyRunResult(
            mode=mode,
            branch=branch,
            soul_path=preview.path,
            report_path=str(report_path),
            models_analyzed=summary.total,
            providers=summary.parts,
            known_tasks=len(discovery.known_tasks),
            unknown_tasks=len(discovery.unknown_tasks),
            newly_discovered=len(discovery.newly_discovered),
            recommendation_count=len(optimization.recommendations),
            modified_count=preview.modified_count,
            diff=preview.diff,
        )

        if mode is RunMode.DRY_RUN:
            self._step("Sending summary")
            self._send_summary(result, staged, sent_items=0)
            return result

        self._step("Opening approval batch")
        result.expired_batches = self.store.expire_all(SUPERSEDED_REASON)
        batch_id = f"weekly-{filesystem_stamp(now)}"
        items = self.store.build_items(preview.changes)
        self.store.create_batch(
            batch_id,
            preview.path,
            str(report_path),
            items,
            {"recommendationCount": result.recommendation_count, "modifiedCount": result.modified_count},
        )
        result.batch_id = batch_id

        self._send_summary(result, staged, sent_items=len(items))
        if not items:
            logger.info("No routing changes proposed; nothing to approve")
            return result

        self._step("Sending approval items")
        for item in items:
            text, buttons = item_approval(
                batch_id, item, len(items), self.callback_namespace, self.callback_limit
            )
            try:
                self.notifier.send_message(text, buttons=buttons)
                result.items_sent += 1
            except NotificationError as e:
                logger.warning(f"Failed to send approval item {item.item_index}: {e}")
                result.items_failed += 1

        return result
