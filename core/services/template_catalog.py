"""Premade workout templates and the starter exercise library.

Each template is a list of blocks; each block lists exercises with a
prescription (sets, reps, optional weight guidance). Consumed only by the
bootstrap procedure.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True)
class LibraryExercise:
    name: str
    category: str
    instructions: Optional[str] = None
    video_url: Optional[str] = None


@dataclass(frozen=True)
class CatalogExercise:
    name: str
    sets: int
    reps: str
    weight: Optional[str] = None
    notes: Optional[str] = None

    def prescription(self) -> dict:
        rx: dict = {"sets": self.sets, "reps": self.reps}
        if self.weight:
            rx["weight"] = self.weight
        return rx


@dataclass(frozen=True)
class CatalogBlock:
    title: str
    exercises: tuple[CatalogExercise, ...]


@dataclass
class CatalogTemplate:
    title: str
    description: str
    difficulty: str
    tags: list[str]
    equipment: list[str]
    estimated_duration: int
    blocks: list[CatalogBlock] = field(default_factory=list)


EXERCISE_LIBRARY: list[LibraryExercise] = [
    LibraryExercise("Back Squat", "Strength", "Keep chest up, hips back.", "https://www.youtube.com/embed/SW_C1A-rejs"),
    LibraryExercise("Barbell Bench Press", "Strength", "Keep feet planted, eyes under the bar.", "https://www.youtube.com/embed/rT7DgCr-3pg"),
    LibraryExercise("Conventional Deadlift", "Strength", "Hinge at the hips, keep back straight.", "https://www.youtube.com/embed/op9kVnSso6Q"),
    LibraryExercise("Barbell Overhead Press", "Strength", "Squeeze glutes, press bar over mid-foot."),
    LibraryExercise("Barbell Bent-Over Row", "Strength", "Flat back, pull to lower ribs."),
    LibraryExercise("Pendlay Row", "Strength", "Bar returns to the floor every rep."),
    LibraryExercise("Front Squat", "Strength", "Elbows high, stay upright."),
    LibraryExercise("Romanian Deadlift (Barbell)", "Strength", "Soft knees, push hips back."),
    LibraryExercise("Pull-Up", "Strength", "Full hang to chin over bar."),
    LibraryExercise("Chin-Up", "Strength", "Supinated grip, full range."),
    LibraryExercise("Seated Cable Row", "Strength"),
    LibraryExercise("Lat Pulldown", "Strength"),
    LibraryExercise("Face Pull", "Strength", "Pull rope to forehead, elbows high."),
    LibraryExercise("Dumbbell Shoulder Press", "Strength"),
    LibraryExercise("Incline Dumbbell Bench Press", "Strength"),
    LibraryExercise("Leg Press", "Strength"),
    LibraryExercise("Lying Leg Curl", "Strength"),
    LibraryExercise("Bulgarian Split Squat", "Strength", "Rear foot elevated, front shin vertical."),
    LibraryExercise("Standing Calf Raise (Machine)", "Strength"),
    LibraryExercise("Goblet Squat", "Strength"),
    LibraryExercise("Push-Up", "Bodyweight", "Rigid plank from head to heels."),
    LibraryExercise("Inverted Row", "Bodyweight"),
    LibraryExercise("Glute Bridge", "Bodyweight"),
    LibraryExercise("Walking Lunge", "Bodyweight"),
    LibraryExercise("Plank", "Core", "Brace abs, neutral spine."),
    LibraryExercise("Hanging Leg Raise", "Core"),
    LibraryExercise("Dead Bug", "Core"),
    LibraryExercise("Box Jump", "Plyometrics", "Land softly."),
    LibraryExercise("Burpee", "Conditioning"),
    LibraryExercise("Kettlebell Swing (American)", "Conditioning"),
    LibraryExercise("Foam Roll Quadriceps", "Mobility"),
    LibraryExercise("World's Greatest Stretch", "Mobility"),
    LibraryExercise("Cat-Cow Stretch", "Mobility"),
]


TEMPLATES: list[CatalogTemplate] = []


def _reg(t: CatalogTemplate) -> CatalogTemplate:
    TEMPLATES.append(t)
    return t


def _ex(name: str, sets: int, reps: str, weight: Optional[str] = None, notes: Optional[str] = None) -> CatalogExercise:
    return CatalogExercise(name=name, sets=sets, reps=reps, weight=weight, notes=notes)


# --- Beginner ---

_reg(CatalogTemplate(
    title="Beginner Full Body A",
    description="Classic beginner full-body session built on compound lifts. Alternate with Full Body B, three days a week.",
    difficulty="Beginner",
    tags=["General Fitness", "Full Body"],
    equipment=["Barbell", "Bench"],
    estimated_duration=45,
    blocks=[
        CatalogBlock("Main Lifts", (
            _ex("Back Squat", 3, "5", weight="Start with bar, add 5lbs each session"),
            _ex("Barbell Bench Press", 3, "5", weight="Start with bar, add 5lbs each session"),
            _ex("Barbell Bent-Over Row", 3, "5", weight="Start light, add 5lbs each session"),
        )),
        CatalogBlock("Core", (
            _ex("Plank", 3, "30-60s", notes="Hold for time"),
        )),
    ],
))

_reg(CatalogTemplate(
    title="Beginner Full Body B",
    description="Alternate with Full Body A. Deadlift and overhead press replace bench and row.",
    difficulty="Beginner",
    tags=["General Fitness", "Full Body"],
    equipment=["Barbell", "Pull-Up Bar"],
    estimated_duration=45,
    blocks=[
        CatalogBlock("Main Lifts", (
            _ex("Back Squat", 3, "5", weight="Add 5lbs from last session"),
            _ex("Barbell Overhead Press", 3, "5", weight="Start with bar, add 2.5lbs each session"),
            _ex("Conventional Deadlift", 1, "5", weight="Start light, add 10lbs each session"),
        )),
        CatalogBlock("Accessories", (
            _ex("Chin-Up", 3, "5-8", notes="Use assisted machine if needed"),
        )),
    ],
))

_reg(CatalogTemplate(
    title="Beginner Bodyweight Starter",
    description="No equipment needed. Builds a base of strength and movement quality before progressing to weights.",
    difficulty="Beginner",
    tags=["General Fitness", "Bodyweight"],
    equipment=[],
    estimated_duration=30,
    blocks=[
        CatalogBlock("Circuit", (
            _ex("Push-Up", 3, "8-12", notes="Start from knees if needed"),
            _ex("Goblet Squat", 3, "10-12", notes="Use a dumbbell or kettlebell"),
            _ex("Inverted Row", 3, "8-10", notes="Adjust bar height to change difficulty"),
            _ex("Glute Bridge", 3, "12-15"),
        )),
        CatalogBlock("Finisher", (
            _ex("Plank", 3, "20-30s"),
            _ex("Walking Lunge", 2, "10 each leg"),
        )),
    ],
))

# --- Intermediate ---

_reg(CatalogTemplate(
    title="Push Day (PPL Split)",
    description="Chest, shoulders and triceps. Part of the Push/Pull/Legs split; run twice per week.",
    difficulty="Intermediate",
    tags=["Hypertrophy", "Push/Pull/Legs"],
    equipment=["Barbell", "Dumbbells", "Bench"],
    estimated_duration=60,
    blocks=[
        CatalogBlock("Compound Pressing", (
            _ex("Barbell Bench Press", 4, "6-8"),
            _ex("Dumbbell Shoulder Press", 3, "8-10"),
            _ex("Incline Dumbbell Bench Press", 3, "8-10"),
        )),
        CatalogBlock("Accessories", (
            _ex("Push-Up", 2, "AMRAP", notes="Finisher, stop one rep shy of failure"),
        )),
    ],
))

_reg(CatalogTemplate(
    title="Pull Day (PPL Split)",
    description="Back and biceps. Compound pulling first, isolation finishers after.",
    difficulty="Intermediate",
    tags=["Hypertrophy", "Push/Pull/Legs"],
    equipment=["Barbell", "Cable Machine", "Pull-Up Bar"],
    estimated_duration=60,
    blocks=[
        CatalogBlock("Main Pulls", (
            _ex("Conventional Deadlift", 3, "5"),
            _ex("Pull-Up", 3, "6-10", notes="Add weight if bodyweight is easy"),
            _ex("Seated Cable Row", 3, "8-10"),
        )),
        CatalogBlock("Shoulder Health", (
            _ex("Face Pull", 3, "12-15"),
        )),
    ],
))

_reg(CatalogTemplate(
    title="Leg Day (PPL Split)",
    description="Quads, hamstrings, glutes and calves. Part of the Push/Pull/Legs split.",
    difficulty="Intermediate",
    tags=["Hypertrophy", "Push/Pull/Legs"],
    equipment=["Barbell", "Leg Press", "Leg Curl Machine"],
    estimated_duration=65,
    blocks=[
        CatalogBlock("Main Lifts", (
            _ex("Back Squat", 4, "6-8"),
            _ex("Romanian Deadlift (Barbell)", 3, "8-10"),
        )),
        CatalogBlock("Accessories", (
            _ex("Leg Press", 3, "10-12"),
            _ex("Lying Leg Curl", 3, "10-12"),
            _ex("Bulgarian Split Squat", 3, "10 each leg"),
            _ex("Standing Calf Raise (Machine)", 4, "12-15"),
        )),
    ],
))

# --- Advanced / sport ---

_reg(CatalogTemplate(
    title="Powerlifting Peaking - Heavy Day",
    description="Competition lifts at high intensity for lifters preparing for a meet or max-out.",
    difficulty="Advanced",
    tags=["Powerlifting", "Strength"],
    equipment=["Barbell", "Bench", "Squat Rack"],
    estimated_duration=90,
    blocks=[
        CatalogBlock("Competition Lifts", (
            _ex("Back Squat", 5, "3", weight="85-90% 1RM"),
            _ex("Barbell Bench Press", 5, "3", weight="85-90% 1RM"),
            _ex("Conventional Deadlift", 3, "2", weight="85-90% 1RM"),
        )),
        CatalogBlock("Accessories", (
            _ex("Front Squat", 3, "5", notes="Squat accessory for quad strength"),
        )),
    ],
))

_reg(CatalogTemplate(
    title="CrossFit-Style WOD",
    description="Strength and conditioning circuit with minimal rest for total-body fitness.",
    difficulty="Intermediate",
    tags=["CrossFit", "Conditioning"],
    equipment=["Barbell", "Kettlebell", "Plyo Box", "Pull-Up Bar"],
    estimated_duration=40,
    blocks=[
        CatalogBlock("Strength", (
            _ex("Barbell Overhead Press", 3, "10", notes="Moderate weight, controlled pace"),
            _ex("Conventional Deadlift", 3, "10", notes="Moderate weight"),
        )),
        CatalogBlock("Metcon", (
            _ex("Pull-Up", 3, "10-15", notes="Kipping allowed if proficient"),
            _ex("Box Jump", 3, "15", notes="Step down between reps for safety"),
            _ex("Kettlebell Swing (American)", 3, "15"),
            _ex("Burpee", 3, "10", notes="Finisher - go hard"),
        )),
    ],
))

_reg(CatalogTemplate(
    title="Mobility & Recovery Session",
    description="Active recovery focused on mobility and reducing soreness.",
    difficulty="Beginner",
    tags=["Recovery", "Mobility"],
    equipment=["Foam Roller"],
    estimated_duration=25,
    blocks=[
        CatalogBlock("Soft Tissue", (
            _ex("Foam Roll Quadriceps", 1, "60s each leg"),
        )),
        CatalogBlock("Mobility Flow", (
            _ex("World's Greatest Stretch", 2, "5 each side", notes="Hold each position 3-5 seconds"),
            _ex("Cat-Cow Stretch", 2, "10", notes="Slow controlled spinal movement"),
            _ex("Dead Bug", 3, "10 each side", notes="Core activation without spinal stress"),
        )),
    ],
))
