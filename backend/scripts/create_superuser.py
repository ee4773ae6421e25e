#!/usr/bin/env python
import os
import sys
import django
from dotenv import load_dotenv

# Add parent directory to Python path for Django imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

load_dotenv(os.path.join(os.path.dirname(os.path.dirname(__file__)), '.env'))

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'erp.settings')
django.setup()

from django.contrib.auth import get_user_model
from rich.console import Console

console = Console()


def create_superuser():
    """Create the development admin (staff, Admin role) from DEV_ADMIN_* variables."""
    User = get_user_model()
    email = os.getenv('DEV_ADMIN_EMAIL', 'devadmin@example.edu').strip().lower()
    password = os.getenv('DEV_ADMIN_PASSWORD', 'admin123!')
    name = os.getenv('DEV_ADMIN_NAME', 'Admin User')

    if User.objects.filter(email=email).exists():
        console.print(f"[yellow]Superuser with email '{email}' already exists![/yellow]")
        return

    User.objects.create_superuser(email=email, password=password, name=name)
    console.print("[green]✓ Superuser created successfully![/green]")
    console.print(f"Email: {email}")
    console.print(f"Name: {name}")


if __name__ == "__main__":
    create_superuser()
