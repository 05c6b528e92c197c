class Translator:
    def __init__(self) -> None:
        self.language = "en"
        self.translations = {
            "en": {},
            "es": {
                "Home": "Inicio",
                "Track": "Registrar",
                "Totals": "Totales",
                "Welcome back": "Bienvenido de nuevo",
                "Your workout streaks this month": "Tus rachas de entrenamiento este mes",
                "Active days": "Días activos",
                "Previous": "Anterior",
                "Next": "Siguiente",
                "Track workout": "Registrar entrenamiento",
                "Save workout": "Guardar entrenamiento",
                "Exercise": "Ejercicio",
                "Exercises": "Ejercicios",
                "Set": "Serie",
                "Total": "Total",
                "Saved.": "Guardado.",
                "Save failed.": "Error al guardar.",
                "All-time total reps": "Repeticiones totales",
                "Top exercises": "Mejores ejercicios",
                "Refresh totals": "Actualizar totales",
                "Suggestions": "Sugerencias",
                "Date": "Fecha",
                "Total reps (all exercises)": "Repeticiones totales (todos los ejercicios)",
            },
        }

    def set_language(self, lang: str) -> None:
        self.language = lang

    def gettext(self, key: str) -> str:
        return self.translations.get(self.language, {}).get(key, key)

translator = Translator()
