"""Publishing — branch, commit, pull request and labels."""

from niv_updater.engines.publisher.labels import apply_labels
from niv_updater.engines.publisher.publisher import PublishResult, publish, rollback

__all__ = ["PublishResult", "apply_labels", "publish", "rollback"]
