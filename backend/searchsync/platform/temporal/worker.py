"""Temporal worker for searchsync."""

import asyncio
import signal
from datetime import timedelta
from typing import Any, Optional

from aiohttp import web
from temporalio.worker import Worker

from searchsync.core.config import settings
from searchsync.core.logging import logger
from searchsync.platform.temporal.client import temporal_client


class TemporalWorker:
    """Temporal worker for processing workflows and activities."""

    def __init__(self) -> None:
        """Initialize the Temporal worker."""
        self.worker: Optional[Worker] = None
        self.running = False
        self.draining = False
        self.control_server: Optional[web.AppRunner] = None

    async def start(self) -> None:
        """Start the Temporal worker."""
        try:
            # Control server only serves /health and /drain; a failure is not fatal
            try:
                await self._start_control_server()
            except Exception as e:
                logger.warning(f"Failed to start control server: {e}")

            client = await temporal_client.get_client()
            task_queue = settings.TEMPORAL_TASK_QUEUE
            logger.info(f"Starting Temporal worker on task queue: {task_queue}")

            from searchsync.platform.temporal.activities import (
                create_scheduled_sync_request_activity,
                run_sync_request_activity,
                sync_write_event_activity,
            )
            from searchsync.platform.temporal.schedule_service import temporal_schedule_service
            from searchsync.platform.temporal.workflows import (
                RunSyncRequestWorkflow,
                ScheduledSyncWorkflow,
                SyncWriteEventWorkflow,
            )

            await temporal_schedule_service.ensure_schedule()

            self.worker = Worker(
                client,
                task_queue=task_queue,
                workflows=[
                    RunSyncRequestWorkflow,
                    SyncWriteEventWorkflow,
                    ScheduledSyncWorkflow,
                ],
                activities=[
                    run_sync_request_activity,
                    sync_write_event_activity,
                    create_scheduled_sync_request_activity,
                ],
                workflow_runner=self._get_sandbox_config(),
                default_heartbeat_throttle_interval=timedelta(seconds=2),
                max_heartbeat_throttle_interval=timedelta(seconds=2),
                graceful_shutdown_timeout=timedelta(
                    seconds=settings.TEMPORAL_GRACEFUL_SHUTDOWN_TIMEOUT
                ),
            )

            self.running = True
            logger.info(
                f"Worker started with graceful shutdown timeout: "
                f"{settings.TEMPORAL_GRACEFUL_SHUTDOWN_TIMEOUT}s"
            )
            await self.worker.run()

        except Exception as e:
            logger.error(f"Error starting Temporal worker: {e}")
            raise

    async def stop(self) -> None:
        """Stop the Temporal worker."""
        if self.worker and self.running:
            logger.info("Stopping worker gracefully")
            self.running = False
            await self.worker.shutdown()

        if self.control_server:
            try:
                await self.control_server.cleanup()
            except Exception as e:
                logger.warning(f"Control server cleanup skipped: {e}")
            self.control_server = None

        await temporal_client.close()

    def build_control_app(self) -> web.Application:
        """Build the control application (``POST /drain``, ``GET /health``)."""
        app = web.Application()
        app.router.add_post("/drain", self._handle_drain)
        app.router.add_get("/health", self._handle_health)
        return app

    async def _start_control_server(self) -> None:
        runner = web.AppRunner(self.build_control_app())
        await runner.setup()
        site = web.TCPSite(runner, "0.0.0.0", settings.WORKER_CONTROL_PORT)
        await site.start()
        self.control_server = runner
        logger.info(
            f"Control server started on 0.0.0.0:{settings.WORKER_CONTROL_PORT} "
            f"(endpoints: /health, /drain)"
        )

    async def _handle_drain(self, request: web.Request) -> web.Response:
        """Stop polling for new work and let running activities finish."""
        logger.warning("DRAIN: Initiating graceful worker shutdown")
        self.draining = True
        if self.worker:
            asyncio.create_task(self._shutdown_worker())
        return web.Response(text="Drain initiated")

    async def _shutdown_worker(self) -> None:
        try:
            if self.worker:
                await self.worker.shutdown()
            logger.info("Worker shutdown complete")
        except Exception as e:
            logger.error(f"Error during worker shutdown: {e}")

    async def _handle_health(self, request: web.Request) -> web.Response:
        """Health check.

        Returns:
            200 OK: Worker is running and accepting work
            503 Service Unavailable: Worker is not running or draining
        """
        if not self.running:
            return web.Response(text="NOT_RUNNING", status=503)
        if self.draining:
            return web.Response(text="DRAINING", status=503)
        return web.Response(text="OK", status=200)

    def _get_sandbox_config(self):
        """Determine the appropriate sandbox configuration."""
        if settings.TEMPORAL_DISABLE_SANDBOX:
            from temporalio.worker import UnsandboxedWorkflowRunner

            logger.warning("TEMPORAL SANDBOX DISABLED - Use only for debugging!")
            return UnsandboxedWorkflowRunner()

        from temporalio.worker.workflow_sandbox import SandboxedWorkflowRunner

        return SandboxedWorkflowRunner()


async def main() -> None:
    """Main function to run the worker."""
    worker = TemporalWorker()

    def signal_handler(signum: int, frame: Any) -> None:
        logger.info(f"Received signal {signum}, shutting down...")
        asyncio.create_task(worker.stop())

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    try:
        await worker.start()
    except KeyboardInterrupt:
        logger.info("Received keyboard interrupt, shutting down...")
    finally:
        await worker.stop()


if __name__ == "__main__":
    asyncio.run(main())
