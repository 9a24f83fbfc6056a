"""Year-scoped sequential patient identifiers.

Patient ids look like ``2024-007``: the calendar year the patient was
created in, then a zero-padded sequence that restarts every year.
"""

import re
from datetime import datetime
from typing import Iterable, Optional

from clinicdesk.schemas.patient import Patient
from clinicdesk.utils.time import utc_now

# Highest sequence number available per year
MAX_SEQUENCE = 999

_ID_RE = re.compile(r"^(\d{4})-(\d{3})$")


class PatientIdCapacityError(Exception):
    """Raised when every patient id for the current year is taken."""

    pass


def next_patient_id(
    existing: Iterable[Patient | str],
    now: Optional[datetime] = None,
) -> str:
    """Return the next free patient id for the current year.

    The year is read at call time, so a long-running process rolls over to
    ``<year>-001`` on the first creation of a new year. Ids of other years,
    and ids that do not follow the ``YYYY-NNN`` format, are ignored.

    Args:
        existing: Current patients (or their ids)
        now: Reference time (defaults to the current UTC time)

    Returns:
        Identifier ``<year>-<NNN>``

    Raises:
        PatientIdCapacityError: If the sequence would exceed 999

    Examples:
        >>> next_patient_id(["2024-001", "2024-002"], now=datetime(2024, 5, 1))
        '2024-003'
        >>> next_patient_id([], now=datetime(2025, 1, 1))
        '2025-001'
    """
    year = (now or utc_now()).year

    sequences = []
    for item in existing:
        patient_id = item if isinstance(item, str) else item.id
        match = _ID_RE.match(patient_id)
        if match and int(match.group(1)) == year:
            sequences.append(int(match.group(2)))

    next_sequence = max(sequences, default=0) + 1

    if next_sequence > MAX_SEQUENCE:
        raise PatientIdCapacityError(
            f"Maximum patient IDs for {year} reached ({MAX_SEQUENCE})"
        )

    return f"{year}-{next_sequence:03d}"
