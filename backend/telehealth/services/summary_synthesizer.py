# backend/telehealth/services/summary_synthesizer.py
"""Rule-based expansion of free-text doctor notes into a structured summary.

The notes are scanned for a fixed set of clinical themes (plain lowercase
substring matching, no word boundaries, so "pain" also matches "Spain").
Each theme with a synthesis rule contributes a ``SummaryUpdate``; updates
are folded over a default record in ``CONDITION_RULES`` order. Overwritten
fields are last-writer-wins, appended fields accumulate.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, Tuple

from telehealth.exceptions import InvalidConsultationInput
from telehealth.models.consultation import ConditionFlags, ConsultationInput, StructuredSummary

log = logging.getLogger(__name__)

KEYWORDS: Dict[str, Tuple[str, ...]] = {
    "headache": ("headache", "head pain", "migraine"),
    "bp": ("bp", "blood pressure", "hypertension"),
    "diabetes": ("diabetes", "blood sugar", "glucose"),
    "respiratory": ("cough", "breathing", "asthma", "wheez"),
    "skin": ("rash", "skin", "eczema"),
    "mental": ("anxiety", "depression", "stress", "sleep"),
    "gastro": ("stomach", "nausea", "bowel", "abdomen"),
    "musculo": ("pain", "back", "joint", "muscle"),
    "infection": ("infection", "fever", "temperature", "antibiotic"),
}

_STRIPPED_FIELDS = (
    "symptoms_presented",
    "examination_findings",
    "treatment_plan",
    "medications_prescribed",
    "lifestyle_recommendations",
    "patient_education",
    "additional_notes",
)


@dataclass(frozen=True)
class SummaryUpdate:
    """Partial change to a draft summary.

    ``append`` values are concatenated onto the current field (they carry
    their own leading separator); ``overwrite`` values replace it.
    """

    overwrite: Dict[str, object] = field(default_factory=dict)
    append: Dict[str, str] = field(default_factory=dict)

    def apply(self, draft: Dict[str, object]) -> Dict[str, object]:
        updated = dict(draft)
        for name, suffix in self.append.items():
            updated[name] = f"{updated[name]}{suffix}"
        updated.update(self.overwrite)
        return updated


Rule = Callable[[str, ConsultationInput], SummaryUpdate]


def _flags_for(text: str) -> ConditionFlags:
    # text must already be lowercased
    return ConditionFlags(**{name: any(k in text for k in words) for name, words in KEYWORDS.items()})


def detect_conditions(notes: str) -> ConditionFlags:
    return _flags_for(notes.lower())


def _headache(text: str, c: ConsultationInput) -> SummaryUpdate:
    overwrite = {
        "diagnosis": "Tension-type headache / Cephalgia under investigation",
        # Seeded from current symptoms rather than appended to the chief complaint
        "symptoms_presented": c.current_symptoms + " Patient reports headaches as described. Duration and pattern noted.",
        "treatment_plan": (
            "1. Analgesic therapy as prescribed\n"
            "2. Headache diary to track frequency, triggers, and severity\n"
            "3. Lifestyle modifications including stress management and adequate hydration"
        ),
        "medications_prescribed": (
            "Paracetamol 1g QDS PRN (max 4g/24hrs). "
            "Consider Ibuprofen 400mg TDS with food if paracetamol insufficient."
        ),
        "lifestyle_recommendations": (
            "Maintain regular sleep schedule (7-8 hours). Stay well hydrated (2L water daily). "
            "Regular breaks from screen work. Consider relaxation techniques."
        ),
        "patient_education": (
            "Headaches can have multiple triggers including stress, dehydration, poor posture, "
            "and eye strain. Keeping a headache diary will help identify patterns."
        ),
        "follow_up_notes": (
            "Review in 2 weeks with headache diary. If headaches worsen or are accompanied "
            "by visual changes, seek urgent attention."
        ),
        "red_flags": (
            "Seek immediate attention if: sudden severe headache, headache with fever and neck "
            "stiffness, visual disturbances, weakness or numbness, confusion."
        ),
    }
    if "refer" in text or "neuro" in text:
        overwrite.update(
            referral_required=True,
            referral_specialty="Neurology",
            referral_notes="For specialist assessment if symptoms persist despite initial management.",
        )
    return SummaryUpdate(
        overwrite=overwrite,
        append={
            "examination_findings": " Neurological assessment: no focal deficits observed. Cranial nerves grossly intact.",
        },
    )


def _blood_pressure(text: str, c: ConsultationInput) -> SummaryUpdate:
    stage = "Stage 1" if "140" in text or "high" in text else "Under review"
    return SummaryUpdate(
        overwrite={
            "diagnosis": f"Hypertension - {stage}",
            "treatment_plan": (
                "1. Lifestyle modifications as first-line\n"
                "2. Home BP diary\n"
                "3. Consider pharmacological intervention if insufficient after 3 months"
            ),
            "lifestyle_recommendations": (
                "Reduce sodium (<6g/day). Regular exercise (150 mins/week). Maintain healthy BMI. "
                "Limit alcohol. DASH diet recommended."
            ),
            "patient_education": (
                "High blood pressure usually has no symptoms but increases risk of heart disease "
                "and stroke. Regular monitoring is essential."
            ),
            "follow_up_notes": "Review in 2-4 weeks with home BP diary. Fasting bloods if not done recently.",
            "red_flags": (
                "Seek urgent attention if: severe headache with BP >180/120, chest pain, "
                "visual disturbance, breathlessness."
            ),
        },
        append={
            "symptoms_presented": " Elevated blood pressure readings noted.",
            "examination_findings": " Blood pressure measured and recorded.",
            "medications_prescribed": "\nConsider Amlodipine 5mg OD or Ramipril 2.5mg OD if BP remains elevated.",
        },
    )


def _respiratory(text: str, c: ConsultationInput) -> SummaryUpdate:
    condition = "asthma exacerbation" if "asthma" in text else "respiratory tract condition"
    if "inhaler" in text:
        medications = "Salbutamol inhaler 100mcg 2 puffs PRN via spacer."
    else:
        medications = "Respiratory medication as discussed."
    return SummaryUpdate(
        overwrite={
            "diagnosis": f"Respiratory symptoms - possible {condition}",
            "treatment_plan": (
                "1. Bronchodilator therapy if indicated\n"
                "2. Monitor symptoms and peak flow\n"
                "3. Smoking cessation if applicable"
            ),
            "medications_prescribed": medications,
            "lifestyle_recommendations": (
                "Avoid known triggers. Good ventilation. Annual flu vaccination. "
                "Smoking cessation if applicable."
            ),
            "red_flags": (
                "Seek emergency care if: severe breathlessness, unable to complete sentences, "
                "blue lips, chest pain, or peak flow <50%."
            ),
        },
        append={
            "symptoms_presented": " Respiratory symptoms including cough and/or breathing difficulty.",
            "examination_findings": " Respiratory assessment conducted. Auscultation findings noted.",
        },
    )


def _mental_health(text: str, c: ConsultationInput) -> SummaryUpdate:
    if "anxiety" in text:
        diagnosis = "Generalised Anxiety Disorder (assessment)"
    else:
        diagnosis = "Low mood / Depression screen"
    if "sertraline" in text:
        medications = "Sertraline 50mg OD. Review in 2 weeks."
    else:
        medications = "Non-pharmacological approaches first line."
    return SummaryUpdate(
        overwrite={
            "diagnosis": diagnosis,
            "treatment_plan": (
                "1. Consider CBT referral via IAPT\n"
                "2. Self-help resources provided\n"
                "3. Medication review if symptoms persist"
            ),
            "medications_prescribed": medications,
            "lifestyle_recommendations": (
                "Regular physical activity. Maintain social connections. Limit alcohol/caffeine. "
                "Sleep hygiene. Mindfulness techniques."
            ),
            "patient_education": (
                "Mental health conditions are common and treatable. NHS IAPT services available "
                "for talking therapies."
            ),
            "follow_up_notes": "Review in 2 weeks to assess mood. PHQ-9/GAD-7 to be repeated.",
            "red_flags": (
                "If experiencing thoughts of self-harm, contact NHS 111, Samaritans (116 123), or attend A&E."
            ),
            "referral_required": True,
            "referral_specialty": "IAPT / Psychological Services",
            "referral_notes": "For CBT or counselling as appropriate.",
        },
        append={
            "symptoms_presented": " Psychological symptoms affecting daily functioning.",
            "examination_findings": " Mental state examination conducted. Appearance and behaviour appropriate.",
        },
    )


def _infection(text: str, c: ConsultationInput) -> SummaryUpdate:
    if "uti" in text:
        likely = "urinary tract infection"
    elif "throat" in text:
        likely = "pharyngitis"
    else:
        likely = "infection under assessment"
    return SummaryUpdate(
        overwrite={
            "diagnosis": f"Infection - likely {likely}",
            "treatment_plan": (
                "1. Antibiotic therapy if bacterial\n"
                "2. Adequate hydration and rest\n"
                "3. Symptomatic relief"
            ),
            "medications_prescribed": "Antibiotic as prescribed - complete full course. Paracetamol for fever/pain.",
            "follow_up_notes": "Review if not improving within 48-72 hours, or sooner if deteriorating.",
            "red_flags": (
                "Seek urgent attention if: fever >39°C not responding to paracetamol, rash, "
                "confusion, severe pain."
            ),
        },
        append={
            "symptoms_presented": " Signs of infection as described.",
            "examination_findings": " Temperature noted. Relevant examination conducted.",
        },
    )


def _gastro(text: str, c: ConsultationInput) -> SummaryUpdate:
    return SummaryUpdate(
        overwrite={
            "diagnosis": "Gastrointestinal symptoms under investigation",
            "treatment_plan": (
                "1. Dietary modifications\n"
                "2. Symptomatic relief\n"
                "3. Further investigation if persistent"
            ),
            "medications_prescribed": "Antacid/PPI as appropriate. Anti-emetic if nausea persists.",
            "lifestyle_recommendations": (
                "Regular balanced meals. Avoid trigger foods. Adequate hydration. Stress management."
            ),
            "red_flags": (
                "Seek urgent attention if: severe abdominal pain, vomiting blood, black tarry stools, "
                "persistent vomiting."
            ),
        },
        append={
            "symptoms_presented": " GI symptoms as described.",
            "examination_findings": " Abdominal assessment conducted.",
        },
    )


def _musculoskeletal(text: str, c: ConsultationInput) -> SummaryUpdate:
    if "back" in text:
        site = "back pain"
    elif "joint" in text:
        site = "joint pain"
    else:
        site = "pain"
    return SummaryUpdate(
        overwrite={
            "diagnosis": f"Musculoskeletal {site} - mechanical/non-specific",
            "treatment_plan": (
                "1. Analgesia as prescribed\n"
                "2. Physiotherapy referral if appropriate\n"
                "3. Activity modification advice"
            ),
            "medications_prescribed": "Paracetamol 1g QDS. Ibuprofen 400mg TDS with food. Consider topical NSAIDs.",
            "lifestyle_recommendations": (
                "Stay active within comfort limits. Gentle stretching and exercises. Good posture. "
                "Ergonomic workplace setup."
            ),
            "red_flags": (
                "Seek urgent attention if: loss of bladder/bowel control, progressive weakness, "
                "unexplained weight loss, night pain."
            ),
        },
        append={
            "symptoms_presented": " Pain as described. Onset, character, and aggravating factors noted.",
            "examination_findings": " Musculoskeletal assessment conducted. Range of movement noted.",
        },
    )


# Evaluation order matters: later rules overwrite earlier ones.
# diabetes and skin are detected but have no rule.
CONDITION_RULES: Tuple[Tuple[str, Rule], ...] = (
    ("headache", _headache),
    ("bp", _blood_pressure),
    ("respiratory", _respiratory),
    ("mental", _mental_health),
    ("infection", _infection),
    ("gastro", _gastro),
    ("musculo", _musculoskeletal),
)


def _fallback(c: ConsultationInput) -> SummaryUpdate:
    notes = c.doctor_notes
    return SummaryUpdate(
        overwrite={
            "diagnosis": "Clinical assessment - " + (c.chief_complaint or "symptoms as described"),
            "symptoms_presented": c.current_symptoms or notes[:200],
            "treatment_plan": "Management plan as discussed. " + notes[:300],
            "follow_up_notes": "Review as clinically indicated.",
            "red_flags": "Return or seek urgent care if symptoms worsen or new concerning symptoms develop.",
        }
    )


def _initial_record(c: ConsultationInput) -> Dict[str, object]:
    return {
        "diagnosis": "Clinical assessment based on presenting symptoms",
        "symptoms_presented": c.chief_complaint or "As described in consultation",
        "examination_findings": f"General examination conducted via {c.consultation_type} consultation.",
        "treatment_plan": "Treatment plan discussed with patient.",
        "medications_prescribed": c.current_medications or "As prescribed",
        "lifestyle_recommendations": "General health and wellbeing advice provided.",
        "patient_education": "Patient informed about their condition and management plan.",
        "follow_up_required": True,
        "follow_up_notes": "Review in 2 weeks to assess progress.",
        "follow_up_timeframe": "2 weeks",
        "referral_required": False,
        "referral_specialty": "",
        "referral_notes": "",
        "red_flags": "",
        "additional_notes": "",
    }


def _additional_notes(c: ConsultationInput) -> str:
    if c.allergies and c.allergies != "None reported":
        allergy_status = f"Known allergies: {c.allergies}."
    else:
        allergy_status = "NKDA."
    return f"Summary generated from {c.consultation_type} consultation. {allergy_status}"


def synthesize(consultation: ConsultationInput) -> StructuredSummary:
    """Build the structured consultation summary for one set of doctor notes.

    Pure and deterministic. Raises ``InvalidConsultationInput`` if the notes
    are empty (only reachable when validation was bypassed, e.g. with
    ``model_construct``).
    """
    notes = consultation.doctor_notes
    if not notes or not notes.strip():
        raise InvalidConsultationInput("Doctor notes are required")

    text = notes.lower()
    flags = _flags_for(text)
    log.debug("Detected conditions: %s", flags.active() or "none")

    draft = _initial_record(consultation)
    if flags.has_any():
        for name, rule in CONDITION_RULES:
            if getattr(flags, name):
                draft = rule(text, consultation).apply(draft)
    else:
        draft = _fallback(consultation).apply(draft)

    draft["additional_notes"] = _additional_notes(consultation)
    for name in _STRIPPED_FIELDS:
        draft[name] = draft[name].strip()
    return StructuredSummary(**draft)
