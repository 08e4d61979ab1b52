"""UI strings per locale. Views get a `key -> str` lookup from
`Translator.for_locale`; missing keys fall back to the default locale, then to
the key itself."""

from . import config

LANGUAGES = [
    ("en", "English", "English"),
    ("hi", "Hindi", "हिंदी"),
    ("gu", "Gujarati", "ગુજરાતી"),
    ("mr", "Marathi", "मराठी"),
    ("ta", "Tamil", "தமிழ்"),
    ("te", "Telugu", "తెలుగు"),
    ("bn", "Bengali", "বাংলা"),
    ("pa", "Punjabi", "ਪੰਜਾਬੀ"),
    ("or", "Odia", "ଓଡ଼ିଆ"),
    ("as", "Assamese", "অসমীয়া"),
    ("kn", "Kannada", "ಕನ್ನಡ"),
    ("ml", "Malayalam", "മലയാളം"),
]

CATALOGS = {
    "en": {
        "home": "Home",
        "identify": "Identify Breed",
        "database": "Breed Database",
        "veterinary": "Veterinary Portal",
        "dashboard": "Dashboard",
        "validation": "Community Validation",
        "analytics": "Analytics",
        "settings": "Settings",
        "captureImage": "Capture Image",
        "culturalMarkers": "Cultural Markers",
        "recordSound": "Record Sound",
        "biometricCapture": "Biometric Details",
        "results": "Results",
        "stageImageAnalysis": "Image Analysis",
        "stageCulturalRecognition": "Cultural Recognition",
        "stageAudioProcessing": "Audio Processing",
        "stageBiometricMatching": "Biometric Matching",
        "stageBreedClassification": "Breed Classification",
        "analyzing": "Analyzing Breed...",
        "identificationComplete": "Identification Complete",
        "errorGeneric": "Something went wrong. Please try again.",
        "errorDeviceUnavailable": "Camera or microphone is not available. Allow access or upload a file instead.",
        "errorDeviceBusy": "The device is already in use by another step.",
        "errorUnsupportedFile": "This file type is not supported. Please choose another file.",
        "errorLowQuality": "Image quality is too low. Retake or upload a clearer photo.",
        "errorAuth": "Sign in failed. Check your email and password.",
        "errorInvalidStep": "That action is not available at this step.",
        "errorIncompleteBiometrics": "Capture the ear, horn and muzzle images first.",
        "errorClassification": "Identification failed. Please start a new identification.",
        "errorForbidden": "Your role does not have access to this page.",
        "errorLoginRequired": "Please sign in first.",
    },
    "hi": {
        "home": "मुख्य पृष्ठ",
        "identify": "नस्ल की पहचान",
        "database": "नस्ल डेटाबेस",
        "veterinary": "पशु चिकित्सक पोर्टल",
        "dashboard": "डैशबोर्ड",
        "validation": "सामुदायिक सत्यापन",
        "analytics": "विश्लेषण",
        "settings": "सेटिंग्स",
        "captureImage": "छवि कैप्चर करें",
        "culturalMarkers": "सांस्कृतिक चिह्न",
        "recordSound": "ध्वनि रिकॉर्ड करें",
        "biometricCapture": "बायोमेट्रिक विवरण",
        "results": "परिणाम",
        "analyzing": "नस्ल का विश्लेषण हो रहा है...",
        "identificationComplete": "पहचान पूर्ण",
        "errorDeviceUnavailable": "कैमरा या माइक्रोफ़ोन उपलब्ध नहीं है। अनुमति दें या फ़ाइल अपलोड करें।",
        "errorLowQuality": "छवि की गुणवत्ता कम है। दोबारा लें या स्पष्ट फोटो अपलोड करें।",
        "errorAuth": "साइन इन विफल। अपना ईमेल और पासवर्ड जांचें।",
    },
}


class Translator:
    def __init__(self, catalogs=None, default_locale=config.DEFAULT_LOCALE):
        self.catalogs = catalogs if catalogs is not None else CATALOGS
        self.default_locale = default_locale

    def supports(self, locale):
        return locale in {code for code, _, _ in LANGUAGES}

    def gettext(self, key, locale=None):
        strings = self.catalogs.get(locale or self.default_locale, {})
        if key in strings:
            return strings[key]
        return self.catalogs.get(self.default_locale, {}).get(key, key)

    def for_locale(self, locale):
        return lambda key: self.gettext(key, locale)
