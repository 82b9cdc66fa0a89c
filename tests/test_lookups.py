from feedback_admin.api.v1.academic_config import lookups
from feedback_admin.api.v1.academic_config.normalize import build_tree, derive_course_index, derive_subject_table


def _views():
    tree = build_tree(
        {
            "MBA": {
                "years": ["1", "2"],
                "year_departments": {"1": ["Finance", "Marketing"], "2": []},
                "semesters": ["Trimester 1", "Trimester 2", "Trimester 3"],
            },
            "MCA": {"years": ["1"], "year_departments": {"1": ["Computer Applications"]}},
        },
        {
            "MBA": {
                "1": {
                    "Finance": {
                        "Accounts": {"code": "FN101", "type": "Theory", "batches": ["A", "B"]},
                        "Markets": {"code": "FN102", "type": "Practical", "batches": []},
                    }
                }
            }
        },
    )
    return derive_course_index(tree), derive_subject_table(tree)


def test_courses_and_years() -> None:
    """Courses and years come from the course index."""
    course_index, _ = _views()
    assert lookups.get_all_courses(course_index) == ["MBA", "MCA"]
    assert lookups.get_years_for_course(course_index, "MBA") == ["1", "2"]
    assert lookups.get_years_for_course(course_index, "BBA") == []


def test_departments_for_course_year() -> None:
    course_index, _ = _views()
    assert lookups.get_departments_for_course_year(course_index, "MBA", "1") == ["Finance", "Marketing"]
    assert lookups.get_departments_for_course_year(course_index, "MBA", "2") == []
    assert lookups.get_departments_for_course_year(course_index, "MBA", "9") == []
    assert lookups.get_departments_for_course_year(course_index, "BBA", "1") == []


def test_semesters_default_when_unset() -> None:
    """Courses without semesters get the default pair."""
    course_index, _ = _views()
    assert lookups.get_semesters_for_course(course_index, "MBA") == ["Trimester 1", "Trimester 2", "Trimester 3"]
    assert lookups.get_semesters_for_course(course_index, "MCA") == ["Odd", "Even"]
    assert lookups.get_semesters_for_course(course_index, "BBA", default=["Sem"]) == ["Sem"]


def test_subjects_and_batches() -> None:
    """Unknown keys give empty lists."""
    _, subject_table = _views()
    assert lookups.get_subjects_for_context(subject_table, "MBA", "1", "Finance") == ["Accounts", "Markets"]
    assert lookups.get_subjects_for_context(subject_table, "MBA", "1", "Marketing") == []
    assert lookups.get_subjects_for_context(subject_table, "MCA", "3", "Finance") == []

    details = lookups.get_subject_details(subject_table, "MBA", "1", "Finance")
    assert details["Markets"].code == "FN102"

    assert lookups.get_batches_for_subject(subject_table, "MBA", "1", "Finance", "Accounts") == ["A", "B"]
    assert lookups.get_batches_for_subject(subject_table, "MBA", "1", "Finance", "Markets") == []
    assert lookups.get_batches_for_subject(subject_table, "MBA", "1", "Finance", "Nope") == []
