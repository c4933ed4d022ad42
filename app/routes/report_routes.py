from datetime import date, datetime, timedelta
from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from config.database import get_db
from app.models.daily_report_model import DailyReport
from app.dependencies.auth import get_current_user, require_baby_owner
from app.dependencies.services import get_activity_store
from app.stores.activity_store import ActivityStore
from app.utils.report_generator import generate_daily_summary, generate_statistics, report_notes
from app.schemas.report_schema import DailyReportResponse, DailyReportOut, StatisticsResponse

router = APIRouter(prefix="/report", tags=["daily report"])


@router.post(
    "/generate",
    response_model=DailyReportResponse
)
def generate_daily_report(
    baby_id: str = Query(...),
    day: Optional[date] = None,
    store: ActivityStore = Depends(get_activity_store),
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user)
):
    """
    Gera ou atualiza o relatório diário para o bebê:
    - total_sleep_minutes: soma das durações de sono do dia (em minutos)
    - total_feeds: contagem de mamadas no dia
    - longest_nap_minutes: duração da maior soneca (em minutos)
    - activity_counts: quantidade de atividades por tipo
    """
    day = day or date.today()

    # 1) Confere se o bebê pertence ao usuário logado
    require_baby_owner(baby_id, db, current_user)

    # 2) Busca as atividades do dia para esse bebê
    activities = store.load_today_activities(baby_id, day)
    if not activities:
        raise HTTPException(status_code=400, detail="Nenhuma atividade encontrada para o dia")

    # 3) Calcula o resumo
    summary = generate_daily_summary(activities, day)

    # 4) Atualiza o relatório do dia se já existir; senão, cria novo
    report = (
        db.query(DailyReport)
        .filter_by(baby_id=baby_id, date=day)
        .first()
    )
    if report is None:
        report = DailyReport(baby_id=baby_id, date=day)
        db.add(report)

    report.total_sleep_minutes = summary["total_sleep_minutes"]
    report.longest_nap_minutes = summary["longest_nap_minutes"]
    report.total_feeds = summary["total_feeds"]
    report.activity_counts = summary["activity_counts"]
    report.notes = report_notes(summary)
    db.commit()
    db.refresh(report)

    return report


@router.get(
    "/daily",
    response_model=DailyReportResponse
)
def get_daily_report(
    baby_id: str = Query(...),
    day: Optional[date] = None,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user)
):
    """
    Retorna o relatório diário (hoje, por padrão) para o bebê.
    """
    require_baby_owner(baby_id, db, current_user)

    report = (
        db.query(DailyReport)
        .filter_by(baby_id=baby_id, date=day or date.today())
        .first()
    )
    if not report:
        raise HTTPException(status_code=404, detail="Relatório não encontrado")

    return report


@router.get(
    "/history",
    response_model=List[DailyReportOut]
)
def get_reports_history(
    baby_id: str = Query(...),
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user)
):
    """
    Retorna o histórico completo de DailyReport para um bebê,
    em ordem crescente de data, no formato:
      [{ "date": "YYYY-MM-DD", "total_sleep_minutes": X, "longest_nap_minutes": Y }, ...]
    """
    require_baby_owner(baby_id, db, current_user)

    reports = (
        db.query(DailyReport)
        .filter_by(baby_id=baby_id)
        .order_by(DailyReport.date.asc())
        .all()
    )

    return [
        {
            "date": r.date.isoformat(),
            "total_sleep_minutes": r.total_sleep_minutes,
            "longest_nap_minutes": r.longest_nap_minutes,
        }
        for r in reports
    ]


@router.get(
    "/statistics",
    response_model=StatisticsResponse
)
def get_statistics(
    baby_id: str = Query(...),
    period: Literal["day", "week"] = "day",
    end_date: Optional[date] = None,
    store: ActivityStore = Depends(get_activity_store),
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user)
):
    """
    Estatísticas do último dia ou dos últimos 7 dias (incluindo end_date).
    """
    require_baby_owner(baby_id, db, current_user)

    end_date = end_date or date.today()
    days = 1 if period == "day" else 7
    start_date = end_date - timedelta(days=days - 1)
    start = datetime.combine(start_date, datetime.min.time())
    end = datetime.combine(end_date, datetime.min.time()) + timedelta(days=1)

    stats = generate_statistics(store.activities_between(baby_id, start, end), period)
    return {"period": period, "start_date": start_date, **stats}
