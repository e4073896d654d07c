"""
Therapeutic-class catalogue for alternative selection.
Drugs are listed by canonical (lowercase generic) name.
"""

from typing import Dict, List, Optional, Tuple

from ..interactions.models import Severity

# ============================================================================
# Therapeutic Classes
# ============================================================================

THERAPEUTIC_CLASSES: Dict[str, Tuple[str, ...]] = {
    # Cardiovascular
    "ACE_INHIBITORS": ("lisinopril", "enalapril", "ramipril", "benazepril"),
    "ARB": ("losartan", "valsartan", "irbesartan", "olmesartan", "telmisartan"),
    "CCB_DIHYDROPYRIDINE": ("amlodipine", "nifedipine", "felodipine", "cilnidipine"),
    "BETA_BLOCKERS": ("metoprolol", "atenolol", "propranolol", "carvedilol"),
    "STATINS": ("atorvastatin", "simvastatin", "rosuvastatin", "pravastatin"),
    "ANTICOAGULANTS": ("warfarin", "apixaban", "rivaroxaban", "dabigatran", "edoxaban"),
    "P2Y12_INHIBITORS": ("clopidogrel", "prasugrel", "ticagrelor"),

    # Analgesics
    "NON_OPIOID_ANALGESICS": ("acetaminophen",),
    "NSAIDS": ("ibuprofen", "naproxen", "diclofenac", "celecoxib"),
    "OPIOIDS": ("codeine", "tramadol", "morphine", "hydromorphone", "oxycodone"),

    # Gastrointestinal / supportive care
    "PPI": ("omeprazole", "pantoprazole", "esomeprazole", "lansoprazole", "rabeprazole"),
    "H2_BLOCKERS": ("famotidine", "cimetidine", "nizatidine"),
    "ANTIEMETICS_5HT3": ("ondansetron", "granisetron", "palonosetron"),

    # Psychiatric
    "SSRI": ("citalopram", "escitalopram", "sertraline", "fluoxetine", "paroxetine"),
    "TRICYCLICS": ("amitriptyline", "nortriptyline"),

    # Antidiabetics
    "BIGUANIDES": ("metformin",),
    "SULFONYLUREAS": ("glipizide", "glyburide", "glimepiride"),
    "DPP4_INHIBITORS": ("sitagliptin", "linagliptin", "saxagliptin"),

    # Anti-infectives
    "PENICILLINS": ("amoxicillin", "ampicillin", "penicillin"),
    "CEPHALOSPORINS": ("cephalexin", "cefazolin", "ceftriaxone"),
    "MACROLIDES": ("azithromycin", "clarithromycin", "erythromycin"),
    "FLUOROQUINOLONES": ("ciprofloxacin", "levofloxacin", "moxifloxacin"),
    "TETRACYCLINES": ("doxycycline", "minocycline"),
    "AZOLE_ANTIFUNGALS": ("voriconazole", "posaconazole", "isavuconazole"),

    # Oncology
    "ENDOCRINE_BREAST": ("tamoxifen", "anastrozole", "letrozole", "exemestane"),
    "ANTHRACYCLINES": ("doxorubicin", "epirubicin", "daunorubicin"),
    "PLATINUM_COMPOUNDS": ("carboplatin", "cisplatin", "oxaliplatin"),
    "TAXANES": ("paclitaxel", "docetaxel", "cabazitaxel"),
    "FLUOROPYRIMIDINES": ("fluorouracil", "capecitabine"),
}

DRUG_CLASS: Dict[str, str] = {
    drug: drug_class
    for drug_class, members in THERAPEUTIC_CLASSES.items()
    for drug in members
}

# ============================================================================
# Scoring Inputs
# ============================================================================

DEFAULT_EFFICACY = 85.0

# Preferred agents within their class
PREFERRED_EFFICACY: Dict[str, float] = {
    "lisinopril": 95.0,
    "atorvastatin": 95.0,
    "rosuvastatin": 95.0,
    "metformin": 95.0,
    "apixaban": 95.0,
    "ticagrelor": 95.0,
    "prasugrel": 90.0,
    "omeprazole": 90.0,
    "pantoprazole": 90.0,
    "amoxicillin": 90.0,
    "morphine": 90.0,
    "sertraline": 90.0,
    "granisetron": 90.0,
    "anastrozole": 90.0,
    "letrozole": 90.0,
    "famotidine": 90.0,
}

# Severity weights for interaction burden (summed, then capped)
SEVERITY_RISK: Dict[Severity, int] = {
    Severity.MINOR: 1,
    Severity.MODERATE: 2,
    Severity.MAJOR: 3,
    Severity.CONTRAINDICATED: 3,
}

LIKELY_COVERED = "likely-covered"
CHECK_COVERAGE = "check-coverage"

FORMULARY_TIER1 = frozenset({
    "lisinopril", "metformin", "simvastatin", "atorvastatin", "omeprazole",
    "pantoprazole", "amoxicillin", "metoprolol", "amlodipine", "sertraline",
    "morphine", "ondansetron", "tamoxifen", "anastrozole", "famotidine",
})

# ============================================================================
# Patient Suitability
# ============================================================================

ALLERGY_CROSS_REACTIVITY: Dict[str, Tuple[str, ...]] = {
    "penicillin": ("amoxicillin", "ampicillin", "penicillin"),
    "sulfa": ("sulfamethoxazole", "trimethoprim", "celecoxib"),
    "aspirin": ("aspirin", "salicylate"),
    "nsaid": ("ibuprofen", "naproxen", "diclofenac", "celecoxib", "aspirin"),
}

ELDERLY_AGE = 65
PEDIATRIC_AGE = 18
AVOID_IN_ELDERLY = frozenset({"diphenhydramine", "amitriptyline", "nortriptyline"})
AVOID_IN_PEDIATRIC = frozenset({"aspirin", "doxycycline", "minocycline"})

RENAL_DOSE_ADJUST = frozenset({"metformin", "gabapentin", "dabigatran", "rivaroxaban", "apixaban"})
HEPATIC_CAUTION_CLASSES = frozenset({"STATINS"})
HEPATIC_CAUTION_DRUGS = frozenset({"acetaminophen"})


def drug_class_of(drug: str) -> Optional[str]:
    return DRUG_CLASS.get(drug)


def class_members(drug_class: str) -> List[str]:
    return list(THERAPEUTIC_CLASSES.get(drug_class, ()))


def efficacy_score(drug: str) -> float:
    return PREFERRED_EFFICACY.get(drug, DEFAULT_EFFICACY)


def formulary_status(drug: str) -> str:
    return LIKELY_COVERED if drug in FORMULARY_TIER1 else CHECK_COVERAGE


def allergy_conflict(drug: str, allergy: str) -> bool:
    """True if the recorded allergy rules the drug out (direct or cross-reactive)."""
    allergy = allergy.strip().lower()
    if not allergy:
        return False
    if allergy == drug:
        return True
    return any(member in drug for member in ALLERGY_CROSS_REACTIVITY.get(allergy, ()))
