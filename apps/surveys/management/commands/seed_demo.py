from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand
from django.db import transaction

from apps.surveys.models import Form

DEMO_FORMS = [
    {
        "title": "Pesquisa de Satisfação do Cliente",
        "description": "Ajude-nos a melhorar nossos serviços fornecendo seu valioso feedback.",
        "fields": [
            {"id": "field-1", "type": "text", "label": "Nome Completo", "required": True,
             "placeholder": "Digite seu nome completo"},
            {"id": "field-2", "type": "email", "label": "Endereço de Email", "required": True,
             "placeholder": "Digite seu endereço de email"},
            {"id": "field-3", "type": "select", "label": "Como você nos conheceu?", "required": True,
             "options": ["Redes Sociais", "Indicação de Amigo", "Publicidade", "Motor de Busca", "Outro"]},
            {"id": "field-4", "type": "radio", "label": "Como você avalia nosso serviço?", "required": True,
             "options": ["Excelente", "Bom", "Regular", "Ruim", "Muito Ruim"]},
            {"id": "field-5", "type": "textarea", "label": "Comentários Adicionais", "required": False,
             "placeholder": "Compartilhe qualquer pensamento ou sugestão adicional...", "rows": 4},
        ],
    },
    {
        "title": "Avaliação de Produto",
        "description": "Conte-nos sobre sua experiência com nossos produtos.",
        "fields": [
            {"id": "field-1", "type": "text", "label": "Nome do Produto", "required": True,
             "placeholder": "Qual produto você está avaliando?"},
            {"id": "field-2", "type": "number", "label": "Nota (1-10)", "required": True,
             "placeholder": "Digite uma nota de 1 a 10"},
            {"id": "field-3", "type": "checkbox", "label": "O que você mais gostou?", "required": False,
             "options": ["Qualidade", "Preço", "Design", "Funcionalidade", "Atendimento"]},
            {"id": "field-4", "type": "date", "label": "Data da Compra", "required": True},
            {"id": "field-5", "type": "textarea", "label": "Sua Experiência", "required": True,
             "placeholder": "Descreva sua experiência com o produto...", "rows": 3},
        ],
    },
    {
        "title": "Sugestões de Melhoria",
        "description": "Tem ideias para melhorar nossos serviços? Adoraríamos ouvir!",
        "fields": [
            {"id": "field-1", "type": "text", "label": "Área de Interesse", "required": True,
             "placeholder": "Qual área você gostaria de melhorar?"},
            {"id": "field-2", "type": "radio", "label": "Prioridade da Sugestão", "required": True,
             "options": ["Alta", "Média", "Baixa"]},
            {"id": "field-3", "type": "textarea", "label": "Descrição da Sugestão", "required": True,
             "placeholder": "Descreva sua sugestão em detalhes...", "rows": 5},
            {"id": "field-4", "type": "email", "label": "Email para Contato (opcional)", "required": False,
             "placeholder": "Se quiser que entremos em contato"},
        ],
    },
]


class Command(BaseCommand):
    help = "Create the demo administrator, a demo citizen and the demo consultation forms"

    def add_arguments(self, parser):
        parser.add_argument("--admin-password", default="admin123")
        parser.add_argument("--user-password", default="user123")

    @transaction.atomic
    def handle(self, *args, **options):
        User = get_user_model()

        admin = User.objects.filter(email="admin@example.com").first()
        if admin is None:
            admin = User.objects.create_user(
                email="admin@example.com",
                password=options["admin_password"],
                name="Administrador",
                role=User.Role.ADMIN,
            )
        if not User.objects.filter(email="user@example.com").exists():
            User.objects.create_user(email="user@example.com", password=options["user_password"], name="Usuário Demo")

        created = 0
        for demo in DEMO_FORMS:
            _, was_created = Form.objects.get_or_create(
                title=demo["title"],
                defaults={
                    "description": demo["description"],
                    "fields": demo["fields"],
                    "created_by": admin,
                    "is_active": True,
                },
            )
            created += int(was_created)

        self.stdout.write(self.style.SUCCESS(f"Seeded demo users and {created} new forms."))
