"""Built-in academic structures.

A template is used as the starting configuration for a college that has never
saved one (picked by the college code) and can be applied explicitly from the
admin screen. Templates are stored in the same shapes as saved
configurations; the generic default still uses the legacy list-of-names
subject encoding.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Tuple

logger = logging.getLogger(__name__)

_ODD_EVEN = ["Odd", "Even"]


@dataclass(frozen=True)
class AcademicTemplate:
    id: str
    name: str
    description: str
    course_index: Dict[str, Any]
    subject_table: Dict[str, Any]
    institution_code: Optional[str] = None


def _course(years: List[str], departments: List[str]) -> Dict[str, Any]:
    return {
        "years": list(years),
        "year_departments": {year: list(departments) for year in years},
        "semesters": list(_ODD_EVEN),
    }


def _records(entries: Iterable[Tuple[str, str, str]], batches: Iterable[str] = ()) -> Dict[str, Any]:
    return {name: {"code": code, "type": kind, "batches": list(batches)} for name, code, kind in entries}


# ---------------------------------------------------------------------------
# Generic default
# ---------------------------------------------------------------------------

_GENERIC_YEARS_4 = ["1st Year", "2nd Year", "3rd Year", "4th Year"]
_GENERIC_YEARS_2 = ["1st Year", "2nd Year"]
_GENERIC_YEARS_5 = _GENERIC_YEARS_4 + ["5th Year"]

_ENGINEERING_DEPTS = ["Computer Science & Engineering", "Information Technology", "Mechanical Engineering"]
_BUSINESS_DEPTS = ["Business Administration", "Finance & Accounting", "Marketing & Sales"]
_APPLICATIONS_DEPTS = ["Computer Applications", "Software Development"]

GENERIC_COURSE_INDEX: Dict[str, Any] = {
    "Engineering": _course(_GENERIC_YEARS_4, _ENGINEERING_DEPTS),
    "MBA": _course(_GENERIC_YEARS_2, _BUSINESS_DEPTS),
    "MCA": _course(_GENERIC_YEARS_2, _APPLICATIONS_DEPTS),
    "BBA+MBA": _course(_GENERIC_YEARS_5, _BUSINESS_DEPTS),
    "BCA+MCA": _course(_GENERIC_YEARS_5, _APPLICATIONS_DEPTS),
}

GENERIC_SUBJECT_TABLE: Dict[str, Any] = {
    "Engineering": {
        "1st Year": {
            "Computer Science & Engineering": ["Programming Fundamentals", "Data Structures", "Database Systems"],
            "Information Technology": ["Web Development", "Networking", "Software Engineering"],
            "Mechanical Engineering": ["Thermodynamics", "Fluid Mechanics", "Materials Science"],
        },
        "2nd Year": {
            "Computer Science & Engineering": ["Algorithms", "Operating Systems", "Computer Networks"],
            "Information Technology": ["Mobile Development", "Cloud Computing", "Cyber Security"],
            "Mechanical Engineering": ["Heat Transfer", "Dynamics", "Manufacturing Processes"],
        },
        "3rd Year": {
            "Computer Science & Engineering": ["Machine Learning", "Distributed Systems", "Software Architecture"],
            "Information Technology": ["Data Analytics", "IoT", "Blockchain"],
            "Mechanical Engineering": ["CAD/CAM", "Robotics", "Quality Control"],
        },
        "4th Year": {
            "Computer Science & Engineering": ["AI & Deep Learning", "Big Data", "Project Management"],
            "Information Technology": ["DevOps", "Advanced Security", "Digital Transformation"],
            "Mechanical Engineering": ["Advanced Manufacturing", "Sustainable Energy", "Project Management"],
        },
    },
    "MBA": {
        "1st Year": {
            "Business Administration": ["Management Principles", "Business Ethics", "Organizational Behavior"],
            "Finance & Accounting": ["Financial Accounting", "Cost Accounting", "Business Finance"],
            "Marketing & Sales": ["Marketing Management", "Consumer Behavior", "Sales Management"],
        },
        "2nd Year": {
            "Business Administration": ["Strategic Management", "Human Resource Management", "International Business"],
            "Finance & Accounting": ["Investment Analysis", "Financial Markets", "Corporate Finance"],
            "Marketing & Sales": ["Brand Management", "Digital Marketing", "Market Research"],
        },
    },
    "MCA": {
        "1st Year": {
            "Computer Applications": ["Advanced Programming", "Data Structures", "Database Management"],
            "Software Development": ["Software Engineering", "Web Technologies", "Mobile Apps"],
        },
        "2nd Year": {
            "Computer Applications": ["System Analysis", "Network Security", "Cloud Computing"],
            "Software Development": ["Agile Development", "DevOps", "Quality Assurance"],
        },
    },
    "BBA+MBA": {
        "1st Year": {
            "Business Administration": ["Business Communication", "Principles of Management", "Business Law"],
            "Finance & Accounting": ["Financial Literacy", "Basic Accounting", "Business Mathematics"],
            "Marketing & Sales": ["Marketing Fundamentals", "Retail Management", "Customer Service"],
        },
        "2nd Year": {
            "Business Administration": ["Business Strategy", "Entrepreneurship", "Operations Management"],
            "Finance & Accounting": ["Financial Planning", "Taxation", "Risk Management"],
            "Marketing & Sales": ["Advertising", "E-commerce", "International Marketing"],
        },
        "3rd Year": {
            "Business Administration": ["Advanced Management", "Corporate Governance", "Business Analytics"],
            "Finance & Accounting": ["Investment Banking", "Mergers & Acquisitions", "Financial Modeling"],
            "Marketing & Sales": ["Strategic Marketing", "Brand Strategy", "Sales Leadership"],
        },
        "4th Year": {
            "Business Administration": ["Global Business", "Innovation Management", "Leadership"],
            "Finance & Accounting": ["Portfolio Management", "Derivatives", "Financial Risk"],
            "Marketing & Sales": ["Marketing Analytics", "Customer Experience", "Digital Strategy"],
        },
        "5th Year": {
            "Business Administration": ["Executive Leadership", "Change Management", "Strategic Planning"],
            "Finance & Accounting": ["Advanced Finance", "Capital Markets", "Financial Strategy"],
            "Marketing & Sales": ["Marketing Innovation", "Global Marketing", "Business Development"],
        },
    },
    "BCA+MCA": {
        "1st Year": {
            "Computer Applications": ["Computer Fundamentals", "Programming Logic", "Database Concepts"],
            "Software Development": ["Object Oriented Programming", "Web Design", "System Analysis"],
        },
        "2nd Year": {
            "Computer Applications": ["Data Structures", "Operating Systems", "Software Engineering"],
            "Software Development": ["Advanced Programming", "Database Design", "Network Programming"],
        },
        "3rd Year": {
            "Computer Applications": ["System Programming", "Computer Networks", "Information Security"],
            "Software Development": ["Mobile Applications", "Cloud Computing", "Project Management"],
        },
        "4th Year": {
            "Computer Applications": ["Big Data Analytics", "Machine Learning", "IoT"],
            "Software Development": ["DevOps", "Microservices", "AI Applications"],
        },
        "5th Year": {
            "Computer Applications": ["Advanced Analytics", "Blockchain", "Cyber Security"],
            "Software Development": ["Full Stack Development", "Enterprise Solutions", "Innovation Lab"],
        },
    },
}


# ---------------------------------------------------------------------------
# ICEM (engineering college). Subjects carry no batch divisions.
# ---------------------------------------------------------------------------

_ICEM_BE_DEPTS = [
    "Computer Engineering",
    "Information Technology",
    "Mechanical Engineering",
    "Civil Engineering",
    "Electronics & Telecommunication",
]

_ICEM_BE_SUBJECTS: Dict[str, Dict[str, List[Tuple[str, str, str]]]] = {
    "1": {
        "Computer Engineering": [
            ("Engineering Mathematics I", "BSC101", "Theory"),
            ("Programming and Problem Solving", "ESC105", "Theory / Practical"),
        ],
        "Information Technology": [
            ("Engineering Mathematics I", "BSC101", "Theory"),
            ("Basic Electrical Engineering", "ESC103", "Theory / Practical"),
        ],
        "Mechanical Engineering": [
            ("Engineering Mechanics", "ESC102", "Theory"),
            ("Engineering Graphics", "ESC104", "Practical"),
        ],
        "Civil Engineering": [
            ("Engineering Physics", "BSC102", "Theory / Practical"),
            ("Engineering Mechanics", "ESC102", "Theory"),
        ],
        "Electronics & Telecommunication": [
            ("Basic Electronics Engineering", "ESC101", "Theory / Practical"),
            ("Engineering Chemistry", "BSC103", "Theory"),
        ],
    },
    "2": {
        "Computer Engineering": [
            ("Data Structures and Algorithms", "CE201", "Theory / Practical"),
            ("Object Oriented Programming", "CE202", "Theory"),
            ("Discrete Mathematics", "CE203", "Tutorial"),
        ],
        "Information Technology": [
            ("Computer Organization", "IT201", "Theory"),
            ("Database Management Systems", "IT202", "Theory / Practical"),
        ],
        "Mechanical Engineering": [
            ("Strength of Materials", "ME201", "Theory"),
            ("Manufacturing Processes", "ME202", "Practical"),
        ],
        "Civil Engineering": [
            ("Surveying", "CV201", "Theory / Practical"),
            ("Fluid Mechanics", "CV202", "Theory"),
        ],
        "Electronics & Telecommunication": [
            ("Digital Circuits", "ET201", "Theory / Practical"),
            ("Signals and Systems", "ET202", "Theory"),
        ],
    },
    "3": {
        "Computer Engineering": [
            ("Database Management Systems", "CE301", "Theory / Practical"),
            ("Theory of Computation", "CE302", "Theory"),
        ],
        "Information Technology": [
            ("Operating Systems", "IT301", "Theory"),
            ("Web Application Development", "IT302", "Practical"),
        ],
        "Mechanical Engineering": [
            ("Heat Transfer", "ME301", "Theory"),
            ("Design of Machine Elements", "ME302", "Theory / Practical"),
        ],
        "Civil Engineering": [
            ("Structural Analysis", "CV301", "Theory"),
            ("Geotechnical Engineering", "CV302", "Theory / Practical"),
        ],
        "Electronics & Telecommunication": [
            ("Microcontrollers", "ET301", "Theory / Practical"),
            ("Analog Communication", "ET302", "Theory"),
        ],
    },
    "4": {
        "Computer Engineering": [
            ("Machine Learning", "CE401", "Theory"),
            ("Project Stage I", "CE402", "Practical"),
        ],
        "Information Technology": [
            ("Cloud Computing", "IT401", "Theory"),
            ("Project Stage I", "IT402", "Practical"),
        ],
        "Mechanical Engineering": [
            ("Refrigeration and Air Conditioning", "ME401", "Theory"),
            ("Project Stage I", "ME402", "Practical"),
        ],
        "Civil Engineering": [
            ("Transportation Engineering", "CV401", "Theory"),
            ("Project Stage I", "CV402", "Practical"),
        ],
        "Electronics & Telecommunication": [
            ("VLSI Design", "ET401", "Theory / Practical"),
            ("Project Stage I", "ET402", "Practical"),
        ],
    },
}

_ICEM_PG_SUBJECTS: Dict[str, Dict[str, Dict[str, List[Tuple[str, str, str]]]]] = {
    "MTech": {
        "1": {
            "Computer Engineering": [
                ("Advanced Algorithms", "MCE101", "Theory"),
                ("Research Methodology", "MCE102", "Theory"),
            ],
            "Mechanical Engineering": [
                ("Advanced Thermodynamics", "MME101", "Theory"),
                ("Finite Element Analysis", "MME102", "Theory / Practical"),
            ],
        },
        "2": {
            "Computer Engineering": [("Dissertation Stage I", "MCE201", "Practical")],
            "Mechanical Engineering": [("Dissertation Stage I", "MME201", "Practical")],
        },
    },
    "MCA": {
        "1": {
            "Computer Applications": [
                ("Java Programming", "MCA101", "Theory / Practical"),
                ("Data Structures", "MCA102", "Theory"),
                ("Computer Networks", "MCA103", "Theory"),
            ],
        },
        "2": {
            "Computer Applications": [
                ("Mobile Application Development", "MCA201", "Practical"),
                ("Software Testing", "MCA202", "Theory"),
            ],
        },
    },
    "MBA": {
        "1": {
            "Management": [
                ("Managerial Economics", "MBA101", "Theory"),
                ("Accounting for Managers", "MBA102", "Theory"),
            ],
        },
        "2": {
            "Management": [
                ("Strategic Management", "MBA201", "Theory"),
                ("Summer Internship Project", "MBA202", "Practical"),
            ],
        },
    },
}


def _icem() -> AcademicTemplate:
    course_index: Dict[str, Any] = {"BE": _course(["1", "2", "3", "4"], _ICEM_BE_DEPTS)}
    subject_table: Dict[str, Any] = {
        "BE": {
            year: {dept: _records(entries) for dept, entries in depts.items()}
            for year, depts in _ICEM_BE_SUBJECTS.items()
        }
    }
    for course, years in _ICEM_PG_SUBJECTS.items():
        course_index[course] = {
            "years": list(years),
            "year_departments": {year: list(depts) for year, depts in years.items()},
            "semesters": list(_ODD_EVEN),
        }
        subject_table[course] = {
            year: {dept: _records(entries) for dept, entries in depts.items()}
            for year, depts in years.items()
        }
    return AcademicTemplate(
        id="icem",
        name="ICEM Template",
        description="Engineering-focused academic structure with BE, MTech, MCA and MBA programs",
        course_index=course_index,
        subject_table=subject_table,
        institution_code="ICEM",
    )


# ---------------------------------------------------------------------------
# IGSB (business school). Subjects are split into divisions A and B.
# ---------------------------------------------------------------------------

_IGSB_SPECIALISATIONS = ["Marketing", "Finance", "Human Resources", "Operations", "Business Analytics"]

_IGSB_SUBJECTS: Dict[str, Dict[str, Dict[str, List[Tuple[str, str, str]]]]] = {
    "MBA": {
        "1": {
            "Marketing": [("Marketing Management", "MK101", "Theory"), ("Consumer Behaviour", "MK102", "Theory")],
            "Finance": [("Financial Accounting", "FN101", "Theory"), ("Corporate Finance", "FN102", "Theory")],
            "Human Resources": [("Organisational Behaviour", "HR101", "Theory")],
            "Operations": [("Operations Management", "OP101", "Theory")],
            "Business Analytics": [("Business Statistics", "BA101", "Theory / Practical")],
        },
        "2": {
            "Marketing": [("Digital Marketing", "MK201", "Theory / Practical"), ("Brand Management", "MK202", "Theory")],
            "Finance": [("Investment Analysis", "FN201", "Theory"), ("Financial Modelling", "FN202", "Practical")],
            "Human Resources": [("Talent Management", "HR201", "Theory")],
            "Operations": [("Supply Chain Management", "OP201", "Theory")],
            "Business Analytics": [("Predictive Analytics", "BA201", "Theory / Practical")],
        },
    },
    "BBA": {
        "1": {
            "Marketing": [("Principles of Marketing", "BMK101", "Theory")],
            "Finance": [("Business Mathematics", "BFN101", "Tutorial")],
        },
        "2": {
            "Marketing": [("Sales and Distribution", "BMK201", "Theory")],
            "Finance": [("Cost Accounting", "BFN201", "Theory")],
        },
        "3": {
            "Marketing": [("Retail Management", "BMK301", "Theory")],
            "Finance": [("Taxation", "BFN301", "Theory")],
        },
    },
}


def _igsb() -> AcademicTemplate:
    course_index: Dict[str, Any] = {}
    subject_table: Dict[str, Any] = {}
    for course, years in _IGSB_SUBJECTS.items():
        course_index[course] = {
            "years": list(years),
            "year_departments": {
                year: [dept for dept in _IGSB_SPECIALISATIONS if dept in depts] for year, depts in years.items()
            },
            "semesters": list(_ODD_EVEN),
        }
        subject_table[course] = {
            year: {dept: _records(entries, batches=("A", "B")) for dept, entries in depts.items()}
            for year, depts in years.items()
        }
    return AcademicTemplate(
        id="igsb",
        name="IGSB Template",
        description="Business-focused academic structure with MBA and BBA programs",
        course_index=course_index,
        subject_table=subject_table,
        institution_code="IGSB",
    )


DEFAULT_TEMPLATE = AcademicTemplate(
    id="default",
    name="Default Template",
    description="General structure covering Engineering, MBA, MCA and integrated programs",
    course_index=GENERIC_COURSE_INDEX,
    subject_table=GENERIC_SUBJECT_TABLE,
)

TEMPLATES: Dict[str, AcademicTemplate] = {t.id: t for t in (DEFAULT_TEMPLATE, _icem(), _igsb())}


def get_template(template_id: str) -> Optional[AcademicTemplate]:
    return TEMPLATES.get((template_id or "").strip().lower())


def template_for_institution(code: Optional[str]) -> AcademicTemplate:
    """Template matching the college code, or the generic default."""
    normalized = (code or "").strip().upper()
    for template in TEMPLATES.values():
        if template.institution_code and template.institution_code == normalized:
            return template
    if normalized:
        logger.info("No template for college code %s; using %s", normalized, DEFAULT_TEMPLATE.id)
    return DEFAULT_TEMPLATE
