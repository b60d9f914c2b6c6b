# admitprep/core/feature_registry.py

from typing import Dict
from .spec import FeatureSpec

FEATURE_REGISTRY: Dict[str, FeatureSpec] = {

    # =====================
    # ID / Indexing (Identifiers)
    # =====================
    "patient_id": FeatureSpec(
        name="patient_id",
        display_en="Patient ID",
        value_type="nominal",
        clinical_domain="other",
        table_role="id",
    ),

    # =====================
    # Demographics
    # =====================
    "age": FeatureSpec(
        name="age",
        display_en="Age",
        unit="years",
        clinical_domain="demographics",
    ),

    "gender_incongruence_flag": FeatureSpec(
        name="gender_incongruence_flag",
        display_en="EHR sex differs from sex at birth",
        clinical_domain="demographics",
    ),

    "race": FeatureSpec(
        name="race",
        display_en="Race",
        value_type="nominal",
        clinical_domain="demographics",
    ),

    "ethnicity": FeatureSpec(
        name="ethnicity",
        display_en="Ethnicity",
        value_type="nominal",
        clinical_domain="demographics",
    ),

    "zip_3_digit": FeatureSpec(
        name="zip_3_digit",
        display_en="ZIP3",
        value_type="nominal",
        clinical_domain="demographics",
    ),

    # =====================
    # Social determinants (sdoh_* flags are matched by prefix)
    # =====================
    "income_per_capita": FeatureSpec(
        name="income_per_capita",
        display_en="Household income per capita",
        unit="USD",
        clinical_domain="sdoh",
    ),

    # =====================
    # Vitals
    # =====================
    "systolic": FeatureSpec(
        name="systolic",
        display_en="Systolic BP",
        unit="mmHg",
        clinical_domain="vitals",
        clip_bounds=(70, 250),
    ),

    "diastolic": FeatureSpec(
        name="diastolic",
        display_en="Diastolic BP",
        unit="mmHg",
        clinical_domain="vitals",
        clip_bounds=(40, 150),
    ),

    "pulse_pressure": FeatureSpec(
        name="pulse_pressure",
        display_en="Pulse pressure",
        unit="mmHg",
        clinical_domain="vitals",
    ),

    "bp_category": FeatureSpec(
        name="bp_category",
        display_en="BP category",
        value_type="nominal",
        clinical_domain="vitals",
    ),

    "bmi": FeatureSpec(
        name="bmi",
        display_en="BMI",
        unit="kg/m2",
        clinical_domain="vitals",
        clip_bounds=(15, 60),
    ),

    "bmi_category": FeatureSpec(
        name="bmi_category",
        display_en="BMI category",
        value_type="nominal",
        clinical_domain="vitals",
    ),

    "a1c": FeatureSpec(
        name="a1c",
        display_en="HbA1c",
        unit="%",
        clinical_domain="vitals",
        clip_bounds=(3.5, 20),
    ),

    # =====================
    # Medications
    # =====================
    "is_polypharmacy_flag": FeatureSpec(
        name="is_polypharmacy_flag",
        display_en="Polypharmacy (>5 active meds)",
        clinical_domain="medications",
    ),

    "is_on_statin": FeatureSpec(
        name="is_on_statin",
        display_en="On statin",
        clinical_domain="medications",
    ),

    "is_on_ace_arb": FeatureSpec(
        name="is_on_ace_arb",
        display_en="On ACE inhibitor / ARB",
        clinical_domain="medications",
    ),

    # =====================
    # Outcome
    # =====================
    "admission": FeatureSpec(
        name="admission",
        display_en="Admitted",
        value_type="nominal",
        clinical_domain="outcome",
        table_role="outcome",
    ),
}
