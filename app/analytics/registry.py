from app.analytics.late_submission import LateSubmissionTarget
from app.analytics.target import Target

TARGETS: dict[str, type[Target]] = {
    LateSubmissionTarget.name: LateSubmissionTarget,
}


def get_target(name: str, **deps) -> Target:
    try:
        target_class = TARGETS[name]
    except KeyError:
        raise ValueError(f"Unknown target '{name}'") from None
    return target_class(**deps)
