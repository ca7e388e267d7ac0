from scout.worker.loop import Idle, Running, SyncWorker, WorkerState

__all__ = ["Idle", "Running", "SyncWorker", "WorkerState"]
