"""
Derived allocation state, computed on read from plain values.

Nothing here touches the database; ``allocation.services`` gathers the facts
and these functions turn them into statuses, loads, section numbers and
candidate orderings.
"""
from collections import defaultdict
from dataclasses import dataclass, field

from courses.models import SectionType
from users.models import UserType

NOT_STARTED = "Not Started"
PENDING = "Pending"
ALLOCATED = "Allocated"


def course_status(instructor_counts):
    """
    Status of a course from the instructor count of each of its sections.
    No sections, or no staffed section, is "Not Started".
    """
    counts = list(instructor_counts)
    staffed = sum(1 for n in counts if n > 0)
    if staffed == 0:
        return NOT_STARTED
    if staffed == len(counts):
        return ALLOCATED
    return PENDING


def units_for_section(course, section_type):
    return course.units_for(section_type)


def section_contribution(units, faculty_count, is_faculty):
    """
    Load one instructor earns from one section. The section's units are
    split among its faculty only; PhD instructors neither dilute the split
    nor earn a share.
    """
    if not is_faculty or faculty_count <= 0:
        return 0.0
    return units / faculty_count


def section_ordinals(sections):
    """
    section id -> 1-based number among same-type siblings of the same master,
    ordered by creation time (id breaks ties).
    """
    groups = defaultdict(list)
    for section in sections:
        groups[(section.master_id, section.type)].append(section)
    ordinals = {}
    for siblings in groups.values():
        for number, section in enumerate(sorted(siblings, key=lambda s: (s.created_at, s.pk)), start=1):
            ordinals[section.pk] = number
    return ordinals


def section_label(section_type, ordinal):
    return f"{section_type[0]}{ordinal}"


def rank_candidates(candidates, ranks, exclude=()):
    """
    Order ``candidates`` (objects with ``email``) for assignment. Ranked ones
    come first by ascending preference; unranked keep their input order.
    ``ranks`` maps email -> (preference, taken_consecutively).
    """
    excluded = set(exclude)
    out = []
    for candidate in candidates:
        if candidate.email in excluded:
            continue
        preference, consecutive = ranks.get(candidate.email, (None, False))
        out.append((candidate, preference, consecutive))
    out.sort(key=lambda r: (r[1] is None, r[1] or 0))
    return out


@dataclass(frozen=True)
class SectionFacts:
    course_code: str
    course_name: str
    section_type: str
    units: int
    # (email, user type) per assigned instructor
    instructors: tuple = field(default_factory=tuple)

    @property
    def faculty_count(self):
        return sum(1 for _, kind in self.instructors if kind == UserType.FACULTY)


def display_load(value):
    return "NA" if not value else round(value, 2)


def load_matrix(sections, columns):
    """
    Course x section-type rows against instructor columns.

    ``columns`` is the ordered list of faculty emails. Each row carries its
    allocated/pending section counts and one cell per column; the totals row
    sums each column over every row. Zero loads read "NA".
    """
    type_order = {t: i for i, t in enumerate(SectionType.values)}
    rows = {}
    for facts in sections:
        key = (facts.course_code, facts.section_type)
        row = rows.setdefault(key, {
            "course_code": facts.course_code,
            "course_name": facts.course_name,
            "section_type": facts.section_type,
            "allocated": 0,
            "pending": 0,
            "loads": defaultdict(float),
        })
        if facts.instructors:
            row["allocated"] += 1
        else:
            row["pending"] += 1
        faculty = facts.faculty_count
        for email, kind in facts.instructors:
            row["loads"][email] += section_contribution(facts.units, faculty, kind == UserType.FACULTY)

    totals = defaultdict(float)
    out_rows = []
    for key in sorted(rows, key=lambda k: (k[0], type_order.get(k[1], len(type_order)))):
        row = rows[key]
        loads = row.pop("loads")
        for email in columns:
            totals[email] += loads.get(email, 0.0)
        row["cells"] = [display_load(loads.get(email, 0.0)) for email in columns]
        out_rows.append(row)

    return {
        "columns": list(columns),
        "rows": out_rows,
        "totals": [display_load(totals[email]) for email in columns],
    }
