from django.db import models
from django.utils.translation import gettext_lazy as _


class Gender(models.TextChoices):
    MALE = 'M', _('Male')
    FEMALE = 'F', _('Female')


class PersonTitle(models.TextChoices):
    MR = 'MR', _('Mr.')
    MRS = 'MRS', _('Mrs.')
    MS = 'MS', _('Ms.')
    DR = 'DR', _('Dr.')
    REV = 'REV', _('Rev.')
    PROF = 'PROF', _('Prof.')
