import django.core.validators
import django.db.models.functions.text
from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ("catalog", "0001_initial"),
    ]

    operations = [
        migrations.AlterField(
            model_name="category",
            name="name",
            field=models.CharField(
                max_length=100,
                validators=[django.core.validators.MinLengthValidator(3)],
            ),
        ),
        migrations.AddConstraint(
            model_name="category",
            constraint=models.UniqueConstraint(
                django.db.models.functions.text.Lower("name"),
                name="category_name_ci_unique",
            ),
        ),
        migrations.RemoveConstraint(
            model_name="subcategory",
            name="subcategory_name_per_category_unique",
        ),
        migrations.AddConstraint(
            model_name="subcategory",
            constraint=models.UniqueConstraint(
                models.F("category"),
                django.db.models.functions.text.Lower("name"),
                name="subcategory_name_per_category_ci_unique",
            ),
        ),
    ]
