from catalog.models import DocumentType, Program, ProgramDocument, University


def make_university(code="IITM", name="Institute of Technology", rank=None):
    return University.objects.create(name=name, code=code, city="Chennai", state="Tamil Nadu", rank=rank)


def make_program(university=None, name="Computer Science", fee="500.00"):
    university = university or make_university()
    return Program.objects.create(
        university=university, name=name, degree="B.Tech", duration_years=4, application_fee=fee
    )


def make_document_type(code="transcript", name="Transcript", formats=("pdf",), max_size_mb=1):
    return DocumentType.objects.create(
        name=name, code=code, allowed_formats=list(formats), max_size_mb=max_size_mb
    )


def require(program, document_type, is_required=True):
    ProgramDocument.objects.create(program=program, document_type=document_type, is_required=is_required)
    return document_type
