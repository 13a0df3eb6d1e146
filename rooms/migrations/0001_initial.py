# Generated manually (initial migration).
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        ("people", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Location",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True, primary_key=True, serialize=False, verbose_name="ID"
                    ),
                ),
                ("name", models.CharField(max_length=120)),
                ("building", models.CharField(blank=True, max_length=80)),
                ("floor", models.CharField(blank=True, max_length=40)),
                ("description", models.TextField(blank=True)),
                ("max_occupancy", models.PositiveSmallIntegerField(blank=True, null=True)),
                (
                    "type",
                    models.CharField(
                        choices=[("Apartment", "Apartment"), ("Meeting Room", "Meeting Room")],
                        default="Apartment",
                        max_length=20,
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["name"],
            },
        ),
        migrations.CreateModel(
            name="Bedroom",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True, primary_key=True, serialize=False, verbose_name="ID"
                    ),
                ),
                ("name", models.CharField(max_length=120)),
                ("description", models.TextField(blank=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "location",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="bedrooms",
                        to="rooms.location",
                    ),
                ),
            ],
            options={
                "ordering": ["name"],
            },
        ),
        migrations.CreateModel(
            name="Bed",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True, primary_key=True, serialize=False, verbose_name="ID"
                    ),
                ),
                ("name", models.CharField(max_length=120)),
                ("bed_type", models.CharField(default="single", max_length=40)),
                ("description", models.TextField(blank=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "bedroom",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="beds",
                        to="rooms.bedroom",
                    ),
                ),
            ],
            options={
                "ordering": ["name"],
            },
        ),
        migrations.CreateModel(
            name="Assignment",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True, primary_key=True, serialize=False, verbose_name="ID"
                    ),
                ),
                ("start_date", models.DateField()),
                ("end_date", models.DateField()),
                ("notes", models.TextField(blank=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "bed",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="assignments",
                        to="rooms.bed",
                    ),
                ),
                (
                    "bedroom",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="assignments",
                        to="rooms.bedroom",
                    ),
                ),
                (
                    "location",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="assignments",
                        to="rooms.location",
                    ),
                ),
            ],
            options={
                "db_table": "room_assignments",
                "ordering": ["start_date", "id"],
            },
        ),
        migrations.CreateModel(
            name="AssignmentProfile",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True, primary_key=True, serialize=False, verbose_name="ID"
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "assignment",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="profile_links",
                        to="rooms.assignment",
                    ),
                ),
                (
                    "profile",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="assignment_links",
                        to="people.profile",
                    ),
                ),
            ],
            options={
                "db_table": "room_assignment_profiles",
            },
        ),
        migrations.AddField(
            model_name="assignment",
            name="profiles",
            field=models.ManyToManyField(
                related_name="room_assignments",
                through="rooms.AssignmentProfile",
                to="people.profile",
            ),
        ),
        migrations.AddIndex(
            model_name="assignment",
            index=models.Index(fields=["bed", "start_date", "end_date"], name="idx_assign_bed_dates"),
        ),
        migrations.AddConstraint(
            model_name="assignment",
            constraint=models.CheckConstraint(
                condition=models.Q(start_date__lte=models.F("end_date")),
                name="room_assignment_start_lte_end",
            ),
        ),
        migrations.AddConstraint(
            model_name="assignmentprofile",
            constraint=models.UniqueConstraint(
                fields=("assignment", "profile"), name="unique_room_assignment_profile"
            ),
        ),
    ]
