"""
Certificate Service - No Due certificate as a printable HTML page
"""

from typing import Dict, Any, Optional, List, Tuple
from datetime import datetime, date
from html import escape
import time

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from campusdesk.core.config import settings
from campusdesk.core.exceptions import ApprovalsPendingError, UserNotFoundError
from campusdesk.core.logging_config import logger
from campusdesk.models.no_due_request import APPROVER_ROLES, NoDueRequest
from campusdesk.models.user import User
from campusdesk.services.no_due_service import APPROVER_TITLES, NoDueService
from campusdesk.services.student_service import StudentService

DASH = "&mdash;"


def academic_year(today: date) -> str:
    """June onwards belongs to the year that is starting: 2025-26 from June 2025"""
    if today.month >= 6:
        return f"{today.year}-{str(today.year + 1)[2:]}"
    return f"{today.year - 1}-{str(today.year)[2:]}"


def reference_number(now: datetime, prefix: Optional[str] = None) -> str:
    """``{prefix}/ND/{year}/{last five digits of the epoch millis}``"""
    millis = str(int(now.timestamp() * 1000))
    return f"{prefix or settings.NO_DUE_REF_PREFIX}/ND/{now.year}/{millis[-5:]}"


def format_date(value: date) -> str:
    return value.strftime("%d %B %Y")


class NoDueCertificateService:
    """Render the certificate once every approver has cleared the request"""

    CERTIFICATE_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8" />
  <title>No Due Certificate - {student_name}</title>
  <style>
    body{{font-family:Georgia,'Times New Roman',serif;color:#222;background:#f2f2f2;margin:0}}
    .page{{width:210mm;min-height:297mm;margin:16px auto;background:#fff;padding:18mm 20mm;box-sizing:border-box;border:3px double #1a237e}}
    .header{{text-align:center}}
    .logo{{width:80px}}
    .college-name{{font-size:22px;font-weight:bold;color:#1a237e}}
    .college-sub,.college-addr{{font-size:11px;color:#555}}
    .cert-title{{text-align:center;font-size:24px;letter-spacing:2px;text-transform:uppercase;color:#1a237e;margin-top:18px}}
    .cert-subtitle{{text-align:center;font-size:12px;color:#777;margin-bottom:16px}}
    .meta-row{{display:flex;justify-content:space-between;font-size:12px;margin-bottom:16px}}
    table{{width:100%;border-collapse:collapse;margin-bottom:20px}}
    .details td{{padding:6px 10px;font-size:13px;border-bottom:1px dotted #bbb}}
    .details .label{{font-weight:bold;width:35%}}
    .approvals th{{background:#1a237e;color:#fff;padding:8px;font-size:12px;text-transform:uppercase}}
    .approvals td{{padding:8px 12px;border:1px solid #bbb;font-size:13px}}
    .cleared{{color:#15803d;font-weight:bold}}
    .pending{{color:#b91c1c;font-weight:bold}}
    .body-text{{font-size:13.5px;line-height:1.7;text-align:justify;margin-bottom:18px}}
    .signatures{{display:flex;justify-content:space-between;margin-top:48px}}
    .sig-block{{text-align:center;min-width:120px;font-size:11px}}
    .sig-line{{width:130px;border-top:1px solid #333;margin:0 auto 4px}}
    .footer{{text-align:center;font-size:9px;color:#999;margin-top:28px;border-top:1px solid #ddd;padding-top:8px}}
    @media print{{body{{background:#fff}}.page{{margin:0;border:none}}}}
  </style>
</head>
<body>
<div class="page">
  <div class="header">
    {logo}
    <div class="college-name">{college_name}</div>
    <div class="college-sub">{affiliation}</div>
    <div class="college-addr">{address}</div>
  </div>

  <div class="cert-title">No Due Certificate</div>
  <div class="cert-subtitle">Academic Year {academic_year}</div>

  <div class="meta-row">
    <span><strong>Ref No:</strong> {ref_no}</span>
    <span><strong>Date:</strong> {issue_date}</span>
  </div>

  <table class="details">
    <tr><td class="label">Name of the Student</td><td>{student_name}</td></tr>
    <tr><td class="label">Register Number</td><td>{register_id}</td></tr>
    <tr><td class="label">Department</td><td>{department}</td></tr>
    <tr><td class="label">Class / Section</td><td>{class_name}</td></tr>
    <tr><td class="label">Email Address</td><td>{email}</td></tr>
  </table>

  <div class="body-text">
    This is to certify that <strong>{student_name}</strong>, bearing Register Number
    <strong>{register_id}</strong>, of the Department of <strong>{department}</strong>,
    has no pending dues or obligations with any of the following departments of the
    institution as on the date mentioned above.
  </div>

  <table class="approvals">
    <thead><tr><th>Department / Authority</th><th>Status</th><th>Date</th></tr></thead>
    <tbody>
{approval_rows}
    </tbody>
  </table>

  <div class="signatures">
{signature_blocks}
  </div>

  <div class="footer">
    This is a system-generated certificate issued by {short_name}. Ref: {ref_no}
  </div>
</div>
<script>window.onload = function () {{ window.print(); }};</script>
</body>
</html>
"""

    APPROVAL_ROW = (
        '      <tr><td>{label}</td><td class="{css}">{status}</td><td>{when}</td></tr>'
    )

    SIGNATURE_BLOCK = (
        '    <div class="sig-block"><div class="sig-line"></div>{label}</div>'
    )

    def __init__(self, db: AsyncSession):
        self.db = db
        self.no_due = NoDueService(db)
        self.students = StudentService(db)

    # =====================================================
    # RENDERING
    # =====================================================

    def _approval_rows(self, request: NoDueRequest, today: date) -> str:
        rows: List[str] = []
        for role in APPROVER_ROLES:
            approved = request.is_approved_by(role)
            approved_at = getattr(request, f"{role.value.lower()}_approved_at")
            rows.append(self.APPROVAL_ROW.format(
                label=escape(APPROVER_TITLES[role]),
                css="cleared" if approved else "pending",
                status="&#10003; Cleared" if approved else "&#10007; Pending",
                when=format_date(approved_at or today) if approved else DASH,
            ))
        return "\n".join(rows)

    def render(
        self,
        request: NoDueRequest,
        student: Dict[str, Any],
        now: Optional[datetime] = None,
    ) -> Tuple[str, str]:
        """
        Fill the template for ``request``.

        ``student`` carries name, register_id, department, class_name and
        email; missing values print as a dash. Returns (html, reference no).
        """
        now = now or datetime.now()

        def field(key: str) -> str:
            value = student.get(key)
            return escape(str(value)) if value else DASH

        logo = ""
        if settings.INSTITUTION_LOGO_URL:
            logo = f'<img src="{escape(settings.INSTITUTION_LOGO_URL)}" class="logo" alt="Logo" />'

        ref_no = reference_number(now)
        html = self.CERTIFICATE_TEMPLATE.format(
            logo=logo,
            college_name=escape(settings.INSTITUTION_NAME),
            affiliation=escape(settings.INSTITUTION_AFFILIATION),
            address=escape(settings.INSTITUTION_ADDRESS),
            short_name=escape(settings.INSTITUTION_SHORT_NAME),
            academic_year=academic_year(now.date()),
            ref_no=escape(ref_no),
            issue_date=format_date(now.date()),
            student_name=field("name"),
            register_id=field("register_id"),
            department=field("department"),
            class_name=field("class_name"),
            email=field("email"),
            approval_rows=self._approval_rows(request, now.date()),
            signature_blocks="\n".join(
                self.SIGNATURE_BLOCK.format(label=escape(APPROVER_TITLES[role]))
                for role in APPROVER_ROLES
            ),
        )
        return html, ref_no

    # =====================================================
    # GENERATION
    # =====================================================

    async def generate(self, request_id: str) -> Dict[str, Any]:
        """
        Render the certificate and stamp the request as generated.

        Raises ApprovalsPendingError while any approver flag is still unset.
        """
        start = time.perf_counter()
        request = await self.no_due.get(request_id)
        if not request.all_approved:
            raise ApprovalsPendingError(str(request.id), request.pending_roles)

        result = await self.db.execute(select(User).where(User.id == request.student_id))
        user = result.scalar_one_or_none()
        if not user:
            raise UserNotFoundError(str(request.student_id))

        profile = await self.students.get_by_user_id(str(user.id))
        department = (profile.department if profile and profile.department else user.department)
        student = {
            "name": (profile.full_name if profile else None) or user.full_name,
            "register_id": profile.register_id if profile else None,
            "department": department.value if department else None,
            "class_name": profile.class_name if profile else None,
            "email": user.email,
        }

        html, ref_no = self.render(request, student)
        request = await self.no_due.mark_form_generated(str(request.id))

        logger.info(
            f"No-due certificate {ref_no} generated for {user.email}",
            extra={
                "event_type": "certificate_generated",
                "request_id_ref": str(request.id),
                "duration_ms": (time.perf_counter() - start) * 1000,
            }
        )
        return {
            "html": html,
            "reference_number": ref_no,
            "form_generated_at": request.form_generated_at,
        }
