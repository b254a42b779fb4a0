from dentflow.models.user import User
from dentflow.models.patient import Patient
from dentflow.models.medical_history import MedicalHistory
from dentflow.models.visit import Visit
from dentflow.models.appointment import Appointment, AppointmentSlot
from dentflow.models.camp_submission import CampSubmission
from dentflow.models.audit import AuditEvent
