from django.contrib.auth.models import AbstractBaseUser, BaseUserManager, PermissionsMixin
from django.db import models
from django.utils.translation import gettext_lazy as _


class Role(models.TextChoices):
    ADMIN = "Admin", "Admin"
    MANAGING_DIRECTOR = "ManagingDirector", "Managing Director"
    EXECUTIVE_DIRECTOR = "ExecutiveDirector", "Executive Director"
    GENERAL_MANAGER = "GeneralManager", "General Manager"
    HR_MANAGER = "HRManager", "HR Manager"
    FACTORY_MANAGER = "FactoryManager", "Factory Manager"
    OPERATIONAL_MANAGER = "OperationalManager", "Operational Manager"
    SALES_EXECUTIVE = "SalesExecutive", "Sales Executive"
    SALES_AGENT = "SalesAgent", "Sales Agent"
    CASHIER = "Cashier", "Cashier"
    STORE_MANAGER = "StoreManager", "Store Manager"
    BIDS_OFFICER = "BidsOfficer", "Bids Officer"
    PROCUREMENT_OFFICER = "ProcurementOfficer", "Procurement Officer"
    USER = "User", "User"


class UserManager(BaseUserManager):
    def create_user(self, email, password=None, **extra_fields):
        if not email:
            raise ValueError(_("Email must be set"))
        email = self.normalize_email(email)
        extra_fields.setdefault("is_active", True)
        if not extra_fields.get("role"):
            extra_fields["role"] = Role.USER
        user = self.model(email=email, **extra_fields)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_superuser(self, email, password=None, **extra_fields):
        extra_fields.setdefault("is_staff", True)
        extra_fields.setdefault("is_superuser", True)
        extra_fields.setdefault("role", Role.ADMIN)
        return self.create_user(email, password, **extra_fields)


class User(AbstractBaseUser, PermissionsMixin):
    email = models.EmailField(unique=True)
    first_name = models.CharField(max_length=150)
    last_name = models.CharField(max_length=150, blank=True)
    phone_number = models.CharField(max_length=20, blank=True)
    role = models.CharField(max_length=32, choices=Role.choices, default=Role.USER)
    is_active = models.BooleanField(default=True)
    is_staff = models.BooleanField(default=False)
    date_joined = models.DateTimeField(auto_now_add=True)

    objects = UserManager()

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS = []

    class Meta:
        verbose_name = "user"
        verbose_name_plural = "users"

    @property
    def full_name(self):
        return " ".join(n for n in (self.first_name, self.last_name) if n).strip()

    def __str__(self):
        return self.email
