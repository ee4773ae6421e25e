import os
import pandas as pd
from django.core.management.base import BaseCommand, CommandError
from django.db import transaction
from users.models import Role, Permission, RolePermission
from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich.text import Text


class Command(BaseCommand):
    help = 'Seed capability keys and roles from the permissions matrix CSV (idempotent)'

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.console = Console()

    def add_arguments(self, parser):
        parser.add_argument(
            '--file',
            type=str,
            default=None,
            help='Path to the permissions CSV file'
        )

    @staticmethod
    def _enabled(value):
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            return value.strip().upper() == 'TRUE'
        return False

    def handle(self, *args, **options):
        self.console.print(Panel.fit(
            "[bold blue]Department ERP - Permission Seeder[/bold blue]",
            border_style="blue"
        ))

        # users/management/permissions_matrix.csv
        csv_file = options['file'] or os.path.join(
            os.path.dirname(os.path.dirname(__file__)), 'permissions_matrix.csv'
        )
        if not os.path.exists(csv_file):
            raise CommandError(f"CSV file not found: {csv_file}")

        matrix = pd.read_csv(csv_file, dtype=str, encoding='utf-8-sig')
        if 'permission_key' not in matrix.columns:
            raise CommandError("CSV must have a 'permission_key' column")

        roles = [c for c in matrix.columns if c not in ('permission_key', 'description')]
        self.console.print(f"[cyan]Found roles:[/cyan] {', '.join(roles)}")

        entries = [
            (row['permission_key'].strip(),
             row['description'] if 'description' in matrix.columns and pd.notna(row['description']) else '')
            for _, row in matrix.iterrows()
        ]
        role_keys = {
            role: {row['permission_key'].strip() for _, row in matrix.iterrows() if self._enabled(row[role])}
            for role in roles
        }

        counts = {'roles': 0, 'permissions': 0, 'added': 0, 'removed': 0}
        with transaction.atomic():
            role_objs = {}
            for role_name in roles:
                role, created = Role.objects.get_or_create(
                    role_name=role_name,
                    defaults={'description': f'{role_name} role with system-defined permissions'}
                )
                role_objs[role_name] = role
                if created:
                    counts['roles'] += 1
                    self.console.print(f"[green]✓ Created role:[/green] {role_name}")

            perm_objs = {}
            for key, description in entries:
                permission, created = Permission.objects.get_or_create(
                    permission_key=key, defaults={'description': description}
                )
                if not created and description and permission.description != description:
                    permission.description = description
                    permission.save(update_fields=['description', 'updated_at'])
                perm_objs[key] = permission
                if created:
                    counts['permissions'] += 1
                    self.console.print(f"[green]✓ Created permission:[/green] {key}")

            for role_name, wanted in role_keys.items():
                role = role_objs[role_name]
                current = set(
                    RolePermission.objects.filter(role=role).values_list('permission__permission_key', flat=True)
                )
                for key in wanted - current:
                    RolePermission.objects.get_or_create(role=role, permission=perm_objs[key])
                    counts['added'] += 1
                stale = current - wanted
                if stale:
                    counts['removed'] += RolePermission.objects.filter(
                        role=role, permission__permission_key__in=stale
                    ).delete()[0]

        summary = Text()
        summary.append("SEEDING COMPLETED\n\n", style="bold green")
        summary.append(f"Roles created: {counts['roles']}\n", style="green")
        summary.append(f"Permissions created: {counts['permissions']}\n", style="green")
        summary.append(f"Role-permission assignments added: {counts['added']}\n", style="green")
        summary.append(f"Role-permission assignments removed: {counts['removed']}", style="red")
        self.console.print(Panel(summary, title="Summary", border_style="green"))

        table = Table(title="Final Role Summary")
        table.add_column("Role", style="cyan", no_wrap=True)
        table.add_column("Total Permissions", style="magenta", justify="right")
        for role_name, role in role_objs.items():
            table.add_row(role.role_name, str(RolePermission.objects.filter(role=role).count()))
        self.console.print(table)
