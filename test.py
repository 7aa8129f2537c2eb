import datetime as dt
from dotenv import load_dotenv; load_dotenv()
from lectures.services.aelf import get_readings, candidate_urls

print("Python OK")

day = dt.date.today()
print("Candidates:", candidate_urls(day, "france"))

data = get_readings(day, "france")
print("Day:", data.informations.jour_liturgique_nom, "/", data.informations.couleur)
print("Masses:", [m.nom for m in data.messes])
print("Readings:", [(k, len(g.versions)) for k, g in data.lectures.items()])
print("AELF OK")
