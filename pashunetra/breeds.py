"""
breeds.py

Breed database used by the database portal and to enrich classifier output.
`search` filters the same way the database page does: free text over name,
native name and origin, plus type / category / region filters.
"""

from dataclasses import asdict, dataclass
from typing import Tuple


@dataclass(frozen=True)
class Breed:
    id: str
    name: str
    native_name: str
    scientific_name: str
    origin: str
    type: str
    category: str
    characteristics: Tuple[str, ...]
    milk_yield: str
    body_weight: str
    colors: Tuple[str, ...]
    special_features: Tuple[str, ...]
    regions: Tuple[str, ...]
    aliases: Tuple[str, ...] = ()

    def to_dict(self):
        d = asdict(self)
        d.pop("aliases")
        return d


BREEDS = [
    Breed("1", "Gir", "ગીર", "Bos taurus indicus", "Gujarat, India", "cattle", "dairy",
          ("Distinctive forehead", "Drooping ears", "Docile nature", "Heat tolerant"),
          "8-12 liters/day", "300-400 kg (cow), 450-550 kg (bull)",
          ("White", "Red", "Mixed"),
          ("A2 milk production", "Disease resistant", "Long lactation period"),
          ("Gujarat", "Rajasthan", "Maharashtra")),
    Breed("2", "Sahiwal", "साहीवाल", "Bos taurus indicus", "Punjab/Haryana, India", "cattle", "dairy",
          ("Large size", "Long drooping ears", "Loose skin", "Good mothering ability"),
          "10-16 liters/day", "350-450 kg (cow), 450-600 kg (bull)",
          ("Reddish-brown", "Light red"),
          ("High milk fat content", "Tick resistant", "Adaptable to various climates"),
          ("Punjab", "Haryana", "Uttar Pradesh")),
    Breed("3", "Red Sindhi", "रेड सिंधी", "Bos taurus indicus", "Sindh (now Pakistan)", "cattle", "dairy",
          ("Deep red coat", "Compact body", "Hardy constitution", "Good udder"),
          "6-10 liters/day", "280-350 kg (cow), 400-500 kg (bull)",
          ("Deep red", "Dark red"),
          ("Heat tolerance", "Disease resistance", "Good calving ease"),
          ("Gujarat", "Maharashtra", "Karnataka")),
    Breed("4", "Murrah", "मुर्राह", "Bubalus bubalis", "Haryana, India", "buffalo", "dairy",
          ("Jet black color", "Wall eyes", "Large udder", "Curled horns"),
          "12-18 liters/day", "450-650 kg (female), 550-800 kg (male)",
          ("Jet black",),
          ("Highest milk yield among buffaloes", "High butterfat content", "Long productive life"),
          ("Haryana", "Punjab", "Uttar Pradesh")),
    Breed("5", "Ongole", "ఓంగోలు", "Bos taurus indicus", "Andhra Pradesh, India", "cattle", "dual-purpose",
          ("Large size", "White/grey color", "Prominent hump", "Long legs"),
          "4-8 liters/day", "400-500 kg (cow), 500-650 kg (bull)",
          ("White", "Light grey"),
          ("Excellent draught power", "Heat resistant", "Good walking ability"),
          ("Andhra Pradesh", "Tamil Nadu", "Karnataka")),
    Breed("6", "Tharparkar", "थारपारकर", "Bos taurus indicus", "Rajasthan, India", "cattle", "dual-purpose",
          ("White/grey coat", "Medium size", "Hardy nature", "Good udder"),
          "6-10 liters/day", "300-400 kg (cow), 400-500 kg (bull)",
          ("White", "Light grey"),
          ("Drought resistant", "Low maintenance", "Good fertility"),
          ("Rajasthan", "Gujarat", "Haryana")),
    Breed("7", "Nili-Ravi", "नीली-रावी", "Bubalus bubalis", "Punjab, India/Pakistan", "buffalo", "dairy",
          ("Wall eyes", "White markings on forehead and legs", "Small coiled horns"),
          "10-15 liters/day", "450-550 kg (female), 600-700 kg (male)",
          ("Black", "Brown"),
          ("High butterfat content", "Docile temperament"),
          ("Punjab", "Haryana"),
          ("nili_ravi",)),
    Breed("8", "Holstein Friesian", "होल्स्टीन फ्रीज़ियन", "Bos taurus taurus", "Netherlands", "cattle", "dairy",
          ("Black and white patches", "Large frame", "Large udder"),
          "20-25 liters/day", "550-650 kg (cow), 900-1000 kg (bull)",
          ("Black and white", "Red and white"),
          ("Highest milk volume", "Crossbreeding base for HF crosses"),
          ("Punjab", "Kerala", "Tamil Nadu"),
          ("H_F", "hf")),
    Breed("9", "Jersey", "जर्सी", "Bos taurus taurus", "Jersey, Channel Islands", "cattle", "dairy",
          ("Small frame", "Dished face", "Fawn coat"),
          "10-15 liters/day", "350-450 kg (cow), 550-700 kg (bull)",
          ("Fawn", "Light brown"),
          ("High milk fat", "Early maturity"),
          ("Kerala", "Karnataka", "Tamil Nadu"),
          ("jersey",)),
]

RECOMMENDATIONS = {
    "dairy": ("Excellent for milk production; select bulls with proven daughter yields",
              "High protein feed with mineral mixture during lactation",
              "Regular vaccination schedule and mastitis screening advised"),
    "dual-purpose": ("Suited to mixed milk and draught use; maintain pure-line bulls",
                     "Balanced green and dry fodder; extra energy during work season",
                     "Regular vaccination schedule and hoof care advised"),
    "draft": ("Select for body strength and walking ability",
              "Energy-rich concentrate during working months",
              "Regular vaccination and yoke-gall checks advised"),
}


def get(name):
    """Look a breed up by name, id or classifier label, case-insensitively."""
    key = (name or "").strip().lower()
    for b in BREEDS:
        if key in (b.id, b.name.lower()) or key in (a.lower() for a in b.aliases):
            return b
    return None


def search(term="", type="all", category="all", region="all"):
    term = (term or "").strip().lower()
    out = []
    for b in BREEDS:
        if term and not (term in b.name.lower() or term in b.native_name or term in b.origin.lower()):
            continue
        if type != "all" and b.type != type:
            continue
        if category != "all" and b.category != category:
            continue
        if region != "all" and region not in b.regions:
            continue
        out.append(b)
    return out


def all_regions():
    return sorted({r for b in BREEDS for r in b.regions})
