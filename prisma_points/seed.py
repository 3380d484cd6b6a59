"""
Default catalog seeding.
Inserts the standard actions, prizes and missions into empty catalogs.
"""
import logging
from sqlalchemy.orm import Session

from prisma_points.models import Action, Prize, Mission, User
from prisma_points.constants import (
    ROLE_ADMIN, MISSION_DAILY, MISSION_WEEKLY, MISSION_MONTHLY, GOAL_LOG_ACTION_CATEGORY
)

logger = logging.getLogger("prisma_points.seed")

# (category, description, base points, validator)
DEFAULT_ACTIONS = [
    ("Excelência no Atendimento", "Comentário positivo de cliente referente a atendimento", 120, "Liderança"),
    ("Excelência no Atendimento", "Obter 100% de nota de Qualidade interna", 100, "Qualidade"),
    ("Colaboração e Desenvolvimento", "Mentoria e desenvolvimento de colegas", 100, "Liderança"),
    ("Comprometimento", "Não ter tido ausências durante o mês", 100, "Liderança"),
    ("Comprometimento", "Pontualidade de horários seguindo a sua escala", 100, "Liderança"),
    ("Desenvolvimento Pessoal", "Aplicação prática de aprendizados adquiridos em treinamentos", 100, "Analista"),
    ("Excelência no Atendimento", "Realização de Contato ativo com o cliente", 100, "Analista"),
    ("Operacional", "Logar corretamente e atender a fila de backup telefônico", 90, "Liderança"),
    ("Excelência no Atendimento", "Ser referência no atendimento de um produto ou tipo de cliente", 90, "Especialista"),
    ("Inovação", "Criação de soluções alternativas em atendimentos complexos", 90, "Analista"),
    ("Proatividade", "Proatividade na identificação e resolução de problemas da área", 90, "Liderança"),
    ("Proatividade", "Sinalizar caso crítico", 90, "Especialista"),
    ("Colaboração e Desenvolvimento", "Compartilhamento coletivo de conhecimento / boas práticas", 90, "Analista"),
    ("Comprometimento", "Disponibilidade para adaptação de rotinas", 90, "Liderança"),
    ("Inovação", "Sugerir solução para o/um problema levantado", 85, "Liderança"),
    ("Colaboração e Desenvolvimento", "Se prontificar ou engajar em projetos demandados das áreas de apoio", 85, "Liderança"),
    ("Proatividade", "Sinalizações de falhas na Gaia", 80, "Especialista"),
    ("Inovação", "Inovação e apresentação de novas ideias", 80, "Liderança"),
    ("Desenvolvimento Pessoal", "Participação em treinamentos ou workshops (não obrigatórios)", 80, "Analista"),
    ("Operacional", "Validação de histórico de chamados e contextualizar o ticket atual", 70, "Qualidade"),
    ("Inovação", "Criação de conteúdos faltantes", 70, "Especialista"),
    ("Colaboração e Desenvolvimento", "Reconhecimento interno de outras áreas", 70, "Liderança"),
    ("Colaboração e Desenvolvimento", "Colaboração com colegas - aviso importantes, ações de impacto coletivo", 70, "Analista"),
    ("Engajamento", "Engajamento nas iniciativas internas", 70, "Liderança"),
    ("Engajamento", "Reação aos comunicados no dia útil de trabalho da pessoa", 70, "Analista"),
    ("Operacional", "Assinatura do Checklist dentro do prazo", 70, "Liderança"),
    ("Comprometimento", "Seguir corretamente a escala presencial no mês", 70, "Liderança"),
    ("Operacional", "Seguir corretamente a abertura de ticket no Fluxo especialista", 60, "Especialista"),
    ("Operacional", "Seguir corretamente a abertura de ticket no Fluxo Hardware", 60, "Especialista"),
    ("Proatividade", "Sinalizar conteúdo faltante na Central de Ajuda/Notebook LM / Gaia", 60, "Analista"),
    ("Colaboração e Desenvolvimento", "Ter sido reconhecido por um colega", 60, "Liderança"),
    ("Engajamento", "Participação em reunião com postura ativa", 60, "Analista"),
    ("Comprometimento", "Sinalizar ausências programadas previamente", 60, "Liderança"),
    ("Operacional", "Preenchimento e envio da planilha de ações mensalmente dentro do prazo", 60, "Analista"),
    ("Colaboração e Desenvolvimento", "Reconhecimento positivo de colegas", 50, "Analista"),
]

# (category, description, cost, benefit)
DEFAULT_PRIZES = [
    ("Até 550", "Pegar points com outra pessoa", 300, "Flexibilidade na troca de HO/presencial"),
    ("Até 550", "Receber uma mentoria técnica", 350, "Troca presencial e HO"),
    ("Até 550", "Entrar 30 min mais tarde uma vez", 350, "Flexibilidade no horário"),
    ("Até 550", "Treinamento regras zendesk", 400, "Desenvolvimento profissional"),
    ("Até 550", "Conhecer o detalhamento sobre os custos do setor", 400, "Conhecimento sobre a área"),
    ("Até 550", "Participação em projeto da área", 450, "Desenvolvimento profissional"),
    ("Até 550", "Conhecer fluxos e lógica Eddie /Gaia", 525, "Conhecimento técnico"),
    ("Até 550", "Treinamento power point/planejamento/excel", 550, "Desenvolvimento profissional"),
    ("560 a 900", "1 Saída 30 min antecipada", 560, "Bem-estar e flexibilidade"),
    ("560 a 900", "1 Almoço prolongado - 30min", 650, "Bem-estar e flexibilidade"),
    ("560 a 900", "Entrar 60 min mais tarde uma vez", 650, "Bem-estar e flexibilidade"),
    ("560 a 900", "1 Pausa estendida - 30min direto", 750, "Bem-estar"),
    ("560 a 900", "Experiência de ver a rotina de líder por 1 dia", 850, "Autonomia e conhecimento"),
    ("560 a 900", "Prioridade para escolha de férias", 900, "Autonomia e reconhecimento"),
    ("560 a 900", "1 Saída 60 min antecipada", 900, "Bem-estar e flexibilidade"),
    ("1000 a 1400", "Café com a Fê", 1000, "Networking e visibilidade"),
    ("1000 a 1400", "Mentoria com a equipe estratégica", 1100, "Desenvolvimento profissional"),
    ("1000 a 1400", "Mentoria com CGC", 1200, "Desenvolvimento profissional"),
    ("1000 a 1400", "Aprofundamento em áreas estratégicas", 1200, "Ampliação de conhecimento técnico"),
    ("1000 a 1400", "Mentoria com alguém de outra área", 1300, "Ampliação de networking"),
    ("1000 a 1400", "Mentoria com a diretoria", 1400, "Networking e visibilidade estratégica"),
    ("1500+", "Trocar 1 presencial por 1 dia H.O (T/Q)", 1900, "Flexibilidade e autonomia"),
    ("1500+", "Trocar 1 presencial por 1 dia H.O (T/Q/S)", 1500, "Flexibilidade e autonomia"),
    ("1500+", "No dia do feriado, escala reduzida (meio período)", 2000, "Bem-estar e flexibilidade"),
    ("1500+", "Folga aos Domingo para time 24h", 1600, "Redução de estresse"),
    ("1500+", "2 dias de dayoff (1 + 1 bônus)", 2200, "Recuperação e revitalização"),
    ("1500+", "1 Folga", 2500, "Equilíbrio vida pessoal/profissional"),
    ("1500+", "Emenda de feriado Corpus Christ", 3000, "Bem-estar e descanso"),
    ("1500+", "Emenda de feriado Natal / Ano Novo", 3500, "Bem-estar e descanso"),
    ("1500+", "Emenda de feriado Carnaval", 4000, "Bem-estar e descanso"),
]

DEFAULT_MISSIONS = [
    {
        "title": "Engajamento Rápido",
        "description": "Reaja a 3 comunicados da sua liderança ou da empresa.",
        "mission_type": MISSION_DAILY,
        "goal_type": GOAL_LOG_ACTION_CATEGORY,
        "goal_category": "Engajamento",
        "goal_count": 3,
        "reward_points": 15,
    },
    {
        "title": "Colaborador da Semana",
        "description": "Registre 2 ações de colaboração ou desenvolvimento com seus colegas.",
        "mission_type": MISSION_WEEKLY,
        "goal_type": GOAL_LOG_ACTION_CATEGORY,
        "goal_category": "Colaboração e Desenvolvimento",
        "goal_count": 2,
        "reward_points": 50,
    },
    {
        "title": "Mestre da Inovação",
        "description": "Faça 5 registros na categoria de Inovação este mês, sugerindo melhorias e novas ideias.",
        "mission_type": MISSION_MONTHLY,
        "goal_type": GOAL_LOG_ACTION_CATEGORY,
        "goal_category": "Inovação",
        "goal_count": 5,
        "reward_points": 200,
    },
]


def seed_defaults(db: Session) -> dict:
    """
    Insert default catalogs that are still empty.

    Each catalog is seeded only when it has no rows, so running this on
    every startup is safe.

    Returns:
        Number of rows inserted per catalog
    """
    inserted = {"users": 0, "actions": 0, "prizes": 0, "missions": 0}

    if db.query(User).count() == 0:
        db.add(User(name="Administrator", username="admin", role=ROLE_ADMIN, points=0))
        inserted["users"] = 1

    if db.query(Action).count() == 0:
        for category, description, points, validator in DEFAULT_ACTIONS:
            db.add(Action(category=category, description=description, points=points, validator=validator))
        inserted["actions"] = len(DEFAULT_ACTIONS)

    if db.query(Prize).count() == 0:
        for category, description, cost, benefit in DEFAULT_PRIZES:
            db.add(Prize(category=category, description=description, cost=cost, benefit=benefit))
        inserted["prizes"] = len(DEFAULT_PRIZES)

    if db.query(Mission).count() == 0:
        for mission_data in DEFAULT_MISSIONS:
            db.add(Mission(**mission_data, is_global=True))
        inserted["missions"] = len(DEFAULT_MISSIONS)

    db.commit()
    if any(inserted.values()):
        logger.info(f"Seeded default data: {inserted}")
    return inserted
