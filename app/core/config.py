from datetime import timedelta

# Log store used to label samples. Empty string means no analytics log store.
ANALYTICS_LOGSTORE = "database"

# Event written when a student submits an assignment for grading
SUBMISSION_EVENT_NAME = "\\mod_assign\\event\\assessable_submitted"
SUBMISSION_EVENT_CRUD = "u"
CONTEXT_MODULE = 70

# Enrolments starting earlier than this before the due date are discarded
ENROLMENT_MAX_SPAN = timedelta(days=365) + timedelta(weeks=4)

DEFAULT_LANG = "en"
MESSAGE_URL = "/message/index.php"
