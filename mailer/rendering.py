from django.template.loader import render_to_string

# kind -> subject format string; bodies live in templates/emails/<kind>.{txt,html}
SUBJECTS = {
    "application_status": "Application {number}: {status}",
    "document_review": "{document}: {status}",
    "ticket_reply": "New reply on {number}: {subject}",
}


def render_email(kind, context):
    subject = SUBJECTS[kind].format(**context.get("subject_vars", {}))
    html_body = render_to_string(f"emails/{kind}.html", context)
    text_body = render_to_string(f"emails/{kind}.txt", context)
    return subject, text_body, html_body
