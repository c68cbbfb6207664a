"""Exception types raised by ethozones.

Two failure classes exist:

- :class:`ConfigurationError` is raised while an arena's zone definitions are
  resolved into geometry. It means the arena itself is unusable.
- :class:`InputError` is raised when an analysis call receives arguments that
  cannot produce a meaningful result (unknown zone, non-positive fps, ...).

Both subclass :class:`ValueError` so existing ``except ValueError`` handlers
keep working. Messages start with an error code (``[E2xxx]``) followed by
``WHY`` and ``HOW`` lines.
"""

from __future__ import annotations


def _format_message(code: str, message: str, why: str | None, how: str | None) -> str:
    lines = [f"[{code}] {message}"]
    if why:
        lines.append(f"  WHY: {why}")
    if how:
        lines.append(f"  HOW: {how}")
    return "\n".join(lines)


class ConfigurationError(ValueError):
    """Zone definitions cannot be resolved into geometry.

    Parameters
    ----------
    message : str
        Short description of the problem.
    zone_id : str, optional
        Zone the problem was found in. Included in the message when given.
    code : str, default="E2001"
        Error code. E2001 malformed zone, E2002 missing parent, E2003 cycle,
        E2004 degenerate geometry, E2005 unknown reference point,
        E2006 duplicate name, E2007 invalid arena scale.
    why, how : str, optional
        Explanation and suggested fix appended to the message.

    Attributes
    ----------
    zone_id : str or None
        Offending zone, if the error is attributable to one.
    code : str
        Error code.

    Examples
    --------
    >>> err = ConfigurationError("parent 'arena' not found", zone_id="center", code="E2002")
    >>> err.zone_id
    'center'
    >>> str(err).splitlines()[0]
    "[E2002] Zone 'center': parent 'arena' not found"
    """

    def __init__(
        self,
        message: str,
        *,
        zone_id: str | None = None,
        code: str = "E2001",
        why: str | None = None,
        how: str | None = None,
    ) -> None:
        self.zone_id = zone_id
        self.code = code
        if zone_id is not None:
            message = f"Zone '{zone_id}': {message}"
        super().__init__(_format_message(code, message, why, how))


class InputError(ValueError):
    """An analysis call received invalid arguments.

    Parameters
    ----------
    message : str
        Short description of the problem.
    code : str, default="E2101"
        Error code.
    why, how : str, optional
        Explanation and suggested fix appended to the message.
    """

    def __init__(
        self,
        message: str,
        *,
        code: str = "E2101",
        why: str | None = None,
        how: str | None = None,
    ) -> None:
        self.code = code
        super().__init__(_format_message(code, message, why, how))


def validate_fps(fps: float) -> float:
    """Return ``fps`` as float, raising :class:`InputError` unless it is positive."""
    try:
        value = float(fps)
    except (TypeError, ValueError):
        raise InputError(
            f"fps must be a number, got {fps!r}.",
            code="E2102",
            how="Pass the recording frame rate in frames per second, e.g. fps=25.",
        ) from None
    if not value > 0:
        raise InputError(
            f"fps must be positive, got {fps}.",
            code="E2102",
            why="Durations and latencies are frame counts divided by fps.",
            how="Pass the recording frame rate in frames per second, e.g. fps=25.",
        )
    return value


def validate_min_duration(min_duration: float) -> float:
    """Return ``min_duration`` as float, raising :class:`InputError` if negative."""
    try:
        value = float(min_duration)
    except (TypeError, ValueError):
        raise InputError(
            f"min_duration must be a number of seconds, got {min_duration!r}.",
            code="E2103",
        ) from None
    if not value >= 0:
        raise InputError(
            f"min_duration must be a non-negative number of seconds, got {min_duration}.",
            code="E2103",
            how="Use min_duration=0 to keep every visit.",
        )
    return value
