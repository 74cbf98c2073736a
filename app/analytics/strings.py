from app.core.config import DEFAULT_LANG

STRINGS = {
    "en": {
        "lateassignsubmission": "Students at risk of not meeting the assignment due date",
        "studentsatrisk": "Students at risk of missing the deadline in {$a}",
        "atriskmissingsubmission": "At risk of missing the submission",
        "no": "No",
        "sendmessage": "Send message",
        "viewdetails": "View details",
        "useful": "Useful",
        "notuseful": "Not useful",
        "insightmessagesubject": "New insight for {$a}",
        "timesplitting:singlerange": "All previous activity",
        "timesplitting:upcomingduedate": "Week before the due date",
        "timesplitting:upcomingweek": "Upcoming week",
    },
    "es": {
        "lateassignsubmission": "Estudiantes en riesgo de no cumplir la fecha de entrega",
        "studentsatrisk": "Estudiantes en riesgo de no entregar a tiempo en {$a}",
        "atriskmissingsubmission": "En riesgo de no realizar la entrega",
        "no": "No",
        "sendmessage": "Enviar mensaje",
        "viewdetails": "Ver detalles",
        "useful": "Útil",
        "notuseful": "No útil",
    },
}


def get_string(identifier: str, a: str | None = None, lang: str = DEFAULT_LANG) -> str:
    catalogue = STRINGS.get(lang, {})
    text = catalogue.get(identifier) or STRINGS[DEFAULT_LANG][identifier]
    if a is not None:
        text = text.replace("{$a}", str(a))
    return text
